"""
ResilienceHub Backend — Emotion, Thought & Library Schemas
==========================================================
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from resilience_hub.schemas.common import CamelModel


# ── Emotion records ───────────────────────────────────────────────────────

class EmotionRecordCreate(CamelModel):
    core_emotion: str = Field(min_length=1, max_length=50)
    primary_emotion: str = Field(min_length=1, max_length=50)
    tertiary_emotion: str = Field(min_length=1, max_length=50)
    intensity: int = Field(ge=1, le=10)
    situation: str = Field(min_length=1)
    location: Optional[str] = None
    company: Optional[str] = None
    timestamp: Optional[datetime] = None


class EmotionRecordResponse(CamelModel):
    id: int
    user_id: int
    core_emotion: str
    primary_emotion: str
    tertiary_emotion: str
    intensity: int
    situation: str
    location: Optional[str] = None
    company: Optional[str] = None
    timestamp: datetime


class EmotionStat(CamelModel):
    emotion: str
    count: int
    color: str


# ── Thought records ───────────────────────────────────────────────────────

class ThoughtRecordCreate(CamelModel):
    emotion_record_id: Optional[int] = None
    automatic_thoughts: str = Field(min_length=1)
    cognitive_distortions: List[str] = Field(default_factory=list)
    evidence_for: Optional[str] = None
    evidence_against: Optional[str] = None
    alternative_perspective: Optional[str] = None
    insights_gained: Optional[str] = None
    reflection_rating: Optional[int] = Field(default=None, ge=0, le=10)


class ThoughtRecordResponse(CamelModel):
    id: int
    user_id: int
    emotion_record_id: Optional[int] = None
    automatic_thoughts: str
    cognitive_distortions: List[str]
    evidence_for: Optional[str] = None
    evidence_against: Optional[str] = None
    alternative_perspective: Optional[str] = None
    insights_gained: Optional[str] = None
    reflection_rating: Optional[int] = None
    created_at: datetime


class RatingPoint(CamelModel):
    date: str = Field(description="Calendar day, YYYY-MM-DD (UTC)")
    rating: float = Field(description="Average reflection rating for the day, 1 decimal place")


# ── Protective factors / coping strategies ────────────────────────────────

class LibraryItemCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    is_global: bool = False


class LibraryItemResponse(CamelModel):
    id: int
    user_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    is_global: bool
    created_at: datetime


class ProtectiveFactorUsageCreate(CamelModel):
    thought_record_id: int
    protective_factor_id: int
    effectiveness_rating: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None


class ProtectiveFactorUsageResponse(CamelModel):
    id: int
    user_id: int
    thought_record_id: int
    protective_factor_id: int
    effectiveness_rating: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime


class CopingStrategyUsageCreate(CamelModel):
    thought_record_id: int
    coping_strategy_id: int
    effectiveness_rating: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None


class CopingStrategyUsageResponse(CamelModel):
    id: int
    user_id: int
    thought_record_id: int
    coping_strategy_id: int
    effectiveness_rating: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
