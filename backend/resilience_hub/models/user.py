"""
ResilienceHub Backend — User & Session Models
==============================================

What:  ORM models for the `users` and `sessions` tables.
How:   Declarative SQLAlchemy 2.0 mappings; Alembic reads them for migrations.
Who:   Users are read by the authenticator, the access-scope resolver and the
       user routes; sessions are owned exclusively by SessionStore.

Table Design Notes:
    - role: stored as a short string, exposed to Python as the closed `Role`
      enumeration. Immutable after creation in normal flow.
    - therapist_id: self-reference, meaningful only for clients. This is the
      single source of truth for "therapist T may act on client C".
    - password: hash only; never part of any response schema.
    - sessions.id: opaque unguessable token (not an autoincrement key), so a
      token can be looked up directly by primary key.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from resilience_hub.database import Base, utcnow


class Role(str, Enum):
    """Closed set of principal roles. Every role check goes through this enum."""

    CLIENT = "client"
    THERAPIST = "therapist"
    ADMIN = "admin"


class UserStatus(str, Enum):
    PENDING = "pending"  # invited by a therapist, has not logged in yet
    ACTIVE = "active"


class User(Base):
    """A person using the platform: client, therapist or admin."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Role.CLIENT.value,
        server_default=text("'client'"),
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserStatus.ACTIVE.value,
        server_default=text("'active'"),
    )

    # ── Relationships (plain ids; integrity is enforced by services) ──────
    therapist_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    current_viewing_client_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # ── Subscription ──────────────────────────────────────────────────────
    subscription_plan_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("subscription_plans.id", ondelete="SET NULL"), nullable=True
    )
    subscription_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="inactive", server_default=text("'inactive'")
    )
    subscription_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_users_therapist_id", "therapist_id"),
    )

    @property
    def role_enum(self) -> Role:
        return Role(self.role)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"


class Session(Base):
    """Server-side session: opaque token → user id, valid until `expires_at`."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_sessions_user_id", "user_id"),
        Index("idx_sessions_expires_at", "expires_at"),
    )

    def __repr__(self) -> str:
        # Only a prefix of the token ever reaches logs
        return f"<Session(id='{self.id[:8]}…', user_id={self.user_id})>"
