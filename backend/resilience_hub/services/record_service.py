"""
ResilienceHub Backend — Record Service
======================================

What:  Cascading deletes and aggregate views over a client's records.
Who:   Emotion, thought and journal routes.

Cascades:
    EmotionRecord → linked ThoughtRecords → their usage rows
    ThoughtRecord → usage rows
    JournalEntry  → comments
"""

import logging
from collections import defaultdict
from datetime import timedelta
from typing import Dict, List

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.database import as_utc, utcnow
from resilience_hub.models import (
    CopingStrategyUsage,
    EmotionRecord,
    JournalComment,
    JournalEntry,
    ProtectiveFactorUsage,
    ThoughtRecord,
)
from resilience_hub.schemas.records import EmotionStat, RatingPoint

logger = logging.getLogger(__name__)

EMOTION_COLORS: Dict[str, str] = {
    "Joy": "#F9D71C",
    "Sadness": "#6D87C4",
    "Fear": "#8A65AA",
    "Disgust": "#7DB954",
    "Anger": "#E43D40",
}
DEFAULT_EMOTION_COLOR = "#888888"


class RecordService:
    async def delete_thought_record(self, db: AsyncSession, thought_id: int) -> None:
        await db.execute(
            delete(ProtectiveFactorUsage).where(ProtectiveFactorUsage.thought_record_id == thought_id)
        )
        await db.execute(
            delete(CopingStrategyUsage).where(CopingStrategyUsage.thought_record_id == thought_id)
        )
        await db.execute(delete(ThoughtRecord).where(ThoughtRecord.id == thought_id))

    async def delete_emotion_record(self, db: AsyncSession, emotion_id: int) -> None:
        result = await db.execute(
            select(ThoughtRecord.id).where(ThoughtRecord.emotion_record_id == emotion_id)
        )
        thought_ids = result.scalars().all()
        for thought_id in thought_ids:
            await self.delete_thought_record(db, thought_id)
        await db.execute(delete(EmotionRecord).where(EmotionRecord.id == emotion_id))
        logger.debug("Deleted emotion record %s with %d thought records", emotion_id, len(thought_ids))

    async def delete_journal_entry(self, db: AsyncSession, entry_id: int) -> None:
        await db.execute(delete(JournalComment).where(JournalComment.journal_entry_id == entry_id))
        await db.execute(delete(JournalEntry).where(JournalEntry.id == entry_id))

    async def emotion_stats(self, db: AsyncSession, user_id: int, days: int = 30) -> List[EmotionStat]:
        """Counts of recorded core emotions over the last `days` days, most frequent first."""
        since = utcnow() - timedelta(days=days)
        result = await db.execute(
            select(EmotionRecord.core_emotion, func.count(EmotionRecord.id))
            .where(EmotionRecord.user_id == user_id, EmotionRecord.timestamp >= since)
            .group_by(EmotionRecord.core_emotion)
        )
        stats = [
            EmotionStat(
                emotion=emotion,
                count=count,
                color=EMOTION_COLORS.get(emotion, DEFAULT_EMOTION_COLOR),
            )
            for emotion, count in result.all()
        ]
        return sorted(stats, key=lambda s: (-s.count, s.emotion))

    async def thought_ratings(self, db: AsyncSession, user_id: int, days: int = 30) -> List[RatingPoint]:
        """Daily average reflection rating (1 decimal place) over the last `days` days."""
        since = utcnow() - timedelta(days=days)
        result = await db.execute(
            select(ThoughtRecord.created_at, ThoughtRecord.reflection_rating).where(
                ThoughtRecord.user_id == user_id,
                ThoughtRecord.reflection_rating.is_not(None),
                ThoughtRecord.created_at >= since,
            )
        )
        by_day: Dict[str, List[int]] = defaultdict(list)
        for created_at, rating in result.all():
            by_day[as_utc(created_at).date().isoformat()].append(rating)

        return [
            RatingPoint(date=day, rating=round(sum(values) / len(values), 1))
            for day, values in sorted(by_day.items())
        ]


record_service = RecordService()
