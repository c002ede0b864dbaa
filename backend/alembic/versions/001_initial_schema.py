"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates users, sessions and every user-owned record table.
How:   Tables are created parent-first (plans → users → sessions → records)
       so every foreign key target exists when it is declared.

Rollback: downgrade() drops everything in reverse order (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_now = sa.text("CURRENT_TIMESTAMP")
_false = sa.text("false")


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=_now)


def upgrade() -> None:
    # ── Accounts ──────────────────────────────────────────────────────────
    op.create_table(
        "subscription_plans",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("interval", sa.String(20), nullable=False, server_default=sa.text("'month'")),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("max_clients", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=_false),
        _created_at(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'client'")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column(
            "therapist_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "current_viewing_client_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "subscription_plan_id", sa.Integer(),
            sa.ForeignKey("subscription_plans.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "subscription_status", sa.String(20), nullable=False,
            server_default=sa.text("'inactive'"),
        ),
        sa.Column("subscription_end_date", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("idx_users_therapist_id", "users", ["therapist_id"])

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_sessions_user_id", "sessions", ["user_id"])
    op.create_index("idx_sessions_expires_at", "sessions", ["expires_at"])

    # ── Emotion & thought records ─────────────────────────────────────────
    op.create_table(
        "emotion_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("core_emotion", sa.String(50), nullable=False),
        sa.Column("primary_emotion", sa.String(50), nullable=False),
        sa.Column("tertiary_emotion", sa.String(50), nullable=False),
        sa.Column("intensity", sa.Integer(), nullable=False),
        sa.Column("situation", sa.Text(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=_now),
    )
    op.create_index("idx_emotion_records_user_ts", "emotion_records", ["user_id", "timestamp"])

    op.create_table(
        "thought_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "emotion_record_id", sa.Integer(),
            sa.ForeignKey("emotion_records.id"), nullable=True,
        ),
        sa.Column("automatic_thoughts", sa.Text(), nullable=False),
        sa.Column("cognitive_distortions", sa.JSON(), nullable=False),
        sa.Column("evidence_for", sa.Text(), nullable=True),
        sa.Column("evidence_against", sa.Text(), nullable=True),
        sa.Column("alternative_perspective", sa.Text(), nullable=True),
        sa.Column("insights_gained", sa.Text(), nullable=True),
        sa.Column("reflection_rating", sa.Integer(), nullable=True),
        _created_at(),
    )
    op.create_index("idx_thought_records_user_id", "thought_records", ["user_id"])
    op.create_index("idx_thought_records_emotion_id", "thought_records", ["emotion_record_id"])

    # ── Protective factors & coping strategies ────────────────────────────
    for table in ("protective_factors", "coping_strategies"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("is_global", sa.Boolean(), nullable=False, server_default=_false),
            _created_at(),
        )

    for table, ref_column, ref_table in (
        ("protective_factor_usage", "protective_factor_id", "protective_factors"),
        ("coping_strategy_usage", "coping_strategy_id", "coping_strategies"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column(
                "thought_record_id", sa.Integer(),
                sa.ForeignKey("thought_records.id"), nullable=False,
            ),
            sa.Column(ref_column, sa.Integer(), sa.ForeignKey(f"{ref_table}.id"), nullable=False),
            sa.Column("effectiveness_rating", sa.Integer(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _created_at(),
        )

    # ── Goals & actions ───────────────────────────────────────────────────
    op.create_table(
        "goals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("specific", sa.Text(), nullable=False),
        sa.Column("measurable", sa.Text(), nullable=False),
        sa.Column("achievable", sa.Text(), nullable=False),
        sa.Column("relevant", sa.Text(), nullable=False),
        sa.Column("timebound", sa.Text(), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("therapist_comments", sa.Text(), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=_now),
    )
    op.create_index("idx_goals_user_id", "goals", ["user_id"])

    op.create_table(
        "goal_milestones",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("goal_id", sa.Integer(), sa.ForeignKey("goals.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=_false),
        _created_at(),
    )

    op.create_table(
        "actions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("difficulty_rating", sa.Integer(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=_false),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("mood_before", sa.Integer(), nullable=True),
        sa.Column("mood_after", sa.Integer(), nullable=True),
        sa.Column("reflection", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("idx_actions_user_id", "actions", ["user_id"])

    # ── Journal ───────────────────────────────────────────────────────────
    op.create_table(
        "journal_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("mood", sa.Integer(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=_false),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=_now),
    )
    op.create_index("idx_journal_entries_user_id", "journal_entries", ["user_id"])

    op.create_table(
        "journal_comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "journal_entry_id", sa.Integer(),
            sa.ForeignKey("journal_entries.id"), nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("therapist_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("comment", sa.Text(), nullable=False),
        _created_at(),
    )

    # ── Resources ─────────────────────────────────────────────────────────
    op.create_table(
        "resources",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default=sa.text("'article'")),
        sa.Column("file_url", sa.String(500), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=_false),
        _created_at(),
    )

    op.create_table(
        "resource_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("resource_id", sa.Integer(), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("assigned_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assigned_to", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_priority", sa.Boolean(), nullable=False, server_default=_false),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'assigned'")),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=_now),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "resource_feedback",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("resource_id", sa.Integer(), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        _created_at(),
    )


def downgrade() -> None:
    """Drop every table, children first. Destructive: all data is lost."""
    for table in (
        "resource_feedback",
        "resource_assignments",
        "resources",
        "journal_comments",
        "journal_entries",
        "actions",
        "goal_milestones",
        "goals",
        "coping_strategy_usage",
        "protective_factor_usage",
        "coping_strategies",
        "protective_factors",
        "thought_records",
        "emotion_records",
        "sessions",
        "users",
        "subscription_plans",
    ):
        op.drop_table(table)
