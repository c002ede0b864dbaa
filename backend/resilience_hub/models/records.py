"""
ResilienceHub Backend — Emotion & Thought Record Models
========================================================

What:  ORM models for a client's emotion records, thought records, and the
       usage rows linking a thought record to the protective factors and
       coping strategies applied to it.

Ownership:
    Every row carries `user_id`, the owning user. Dependent rows are removed
    by the services that delete their parents:
        EmotionRecord → ThoughtRecord → *Usage rows
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from resilience_hub.database import Base, utcnow


class EmotionRecord(Base):
    __tablename__ = "emotion_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    # Emotion wheel: core → primary → tertiary
    core_emotion: Mapped[str] = mapped_column(String(50), nullable=False)
    primary_emotion: Mapped[str] = mapped_column(String(50), nullable=False)
    tertiary_emotion: Mapped[str] = mapped_column(String(50), nullable=False)
    intensity: Mapped[int] = mapped_column(Integer, nullable=False)  # 1–10

    situation: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_emotion_records_user_ts", "user_id", "timestamp"),
    )


class ThoughtRecord(Base):
    __tablename__ = "thought_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    emotion_record_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("emotion_records.id"), nullable=True
    )

    automatic_thoughts: Mapped[str] = mapped_column(Text, nullable=False)
    cognitive_distortions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    evidence_for: Mapped[str | None] = mapped_column(Text, nullable=True)
    evidence_against: Mapped[str | None] = mapped_column(Text, nullable=True)
    alternative_perspective: Mapped[str | None] = mapped_column(Text, nullable=True)
    insights_gained: Mapped[str | None] = mapped_column(Text, nullable=True)
    reflection_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 0–10

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_thought_records_user_id", "user_id"),
        Index("idx_thought_records_emotion_id", "emotion_record_id"),
    )


class ProtectiveFactorUsage(Base):
    __tablename__ = "protective_factor_usage"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    thought_record_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("thought_records.id"), nullable=False
    )
    protective_factor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("protective_factors.id"), nullable=False
    )
    effectiveness_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class CopingStrategyUsage(Base):
    __tablename__ = "coping_strategy_usage"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    thought_record_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("thought_records.id"), nullable=False
    )
    coping_strategy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("coping_strategies.id"), nullable=False
    )
    effectiveness_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
