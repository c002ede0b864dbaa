"""
ResilienceHub Backend — User Service
====================================

What:  Registration, login, invitation and administrative user operations.
How:   Stateless service; every method receives the request's AsyncSession.
       Uniqueness is checked up front for clear messages and re-checked by the
       database (IntegrityError → ConflictError) for concurrent registrations.
Who:   `routes/auth.py` and `routes/users.py`.

User deletion cascade (one transaction):
    sessions
    → usage rows, thought records, emotion records
    → user-owned protective factors / coping strategies (and usage rows pointing at them)
    → milestones, goals, actions
    → journal comments (on the user's entries and written by the user), journal entries
    → resource assignments / feedback, resources created by the user
    → clear therapist / current-viewing pointers at the user
    → the user row
"""

import logging
import re
import secrets
from typing import Optional, Tuple

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from resilience_hub.models import (
    Action,
    CopingStrategy,
    CopingStrategyUsage,
    EmotionRecord,
    Goal,
    GoalMilestone,
    JournalComment,
    JournalEntry,
    ProtectiveFactor,
    ProtectiveFactorUsage,
    Resource,
    ResourceAssignment,
    ResourceFeedback,
    Role,
    Session,
    SubscriptionPlan,
    ThoughtRecord,
    User,
    UserStatus,
)
from resilience_hub.repositories import UserRepository
from resilience_hub.schemas.users import InviteClientRequest, ProfileUpdate, RegisterRequest
from resilience_hub.services.access_control import check_user_access
from resilience_hub.services.passwords import hash_password, unusable_password, verify_password
from resilience_hub.services.session_store import SessionStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class UserService:
    """User lifecycle operations. Module-level singleton: `user_service`."""

    # ── Lookups ───────────────────────────────────────────────────────────

    async def get_user(self, db: AsyncSession, user_id: int) -> User:
        user = await UserRepository(db).get_by_id(user_id)
        if user is None:
            raise NotFoundError(resource="User", resource_id=user_id)
        return user

    async def _ensure_unique(
        self,
        users: UserRepository,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> None:
        if username is not None:
            existing = await users.get_by_username(username)
            if existing is not None and existing.id != exclude_id:
                raise ConflictError("Username already exists")
        if email is not None:
            existing = await users.get_by_email(email)
            if existing is not None and existing.id != exclude_id:
                raise ConflictError("Email already exists")

    async def _require_therapist(self, users: UserRepository, therapist_id: int) -> User:
        therapist = await users.get_by_id(therapist_id)
        if therapist is None or therapist.role != Role.THERAPIST.value:
            raise ValidationError("Therapist not found", field="therapistId")
        return therapist

    async def _persist_new_user(self, users: UserRepository, user: User) -> User:
        try:
            return await users.create(user)
        except IntegrityError as e:
            await users.session.rollback()
            raise ConflictError("Username or email already exists") from e

    # ── Registration & login ──────────────────────────────────────────────

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> Tuple[User, Session]:
        """
        Creates an active client or therapist account and opens a session.

        Raises:
            AuthorizationError: an admin account was requested
            ValidationError:    therapistId given for a non-client, or not a therapist
            ConflictError:      username or email already taken
        """
        if payload.role is Role.ADMIN:
            raise AuthorizationError("Admin accounts cannot be created through registration.")

        users = UserRepository(db)
        if payload.therapist_id is not None:
            if payload.role is not Role.CLIENT:
                raise ValidationError("Only clients can be assigned a therapist", field="therapistId")
            await self._require_therapist(users, payload.therapist_id)

        await self._ensure_unique(users, username=payload.username, email=payload.email)

        user = await self._persist_new_user(
            users,
            User(
                username=payload.username,
                email=payload.email,
                password=hash_password(payload.password),
                name=payload.name,
                role=payload.role.value,
                status=UserStatus.ACTIVE.value,
                therapist_id=payload.therapist_id,
            ),
        )
        session = await SessionStore(db).create(user.id)
        logger.info("Registered user %s (%s)", user.id, user.role)
        return user, session

    async def login(
        self, db: AsyncSession, username: str, password: str, remember: bool = False
    ) -> Tuple[User, Session]:
        """Verifies credentials and opens a session. Pending accounts become active."""
        user = await UserRepository(db).get_by_username(username)
        if user is None or not verify_password(password, user.password):
            logger.info("Failed login for username '%s'", username)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if user.status == UserStatus.PENDING.value:
            user.status = UserStatus.ACTIVE.value
            logger.info("Activated pending user %s on first login", user.id)

        session = await SessionStore(db).create(user.id, remember=remember)
        logger.info("User %s logged in (remember=%s)", user.id, remember)
        return user, session

    # ── Therapist / admin operations ──────────────────────────────────────

    async def invite_client(
        self, db: AsyncSession, inviter: Principal, payload: InviteClientRequest
    ) -> User:
        """
        Creates a pending client bound to the inviting therapist.

        The account gets a random password nobody knows; activation happens
        out of band (no email delivery in this service).
        """
        users = UserRepository(db)
        await self._ensure_unique(users, email=payload.email)

        if payload.username is not None:
            await self._ensure_unique(users, username=payload.username)
            username = payload.username
        else:
            username = await self._derive_username(users, payload.email)

        user = await self._persist_new_user(
            users,
            User(
                username=username,
                email=payload.email,
                password=unusable_password(),
                name=payload.name,
                role=Role.CLIENT.value,
                status=UserStatus.PENDING.value,
                therapist_id=inviter.id if inviter.role is Role.THERAPIST else None,
            ),
        )
        logger.info("User %s invited client %s", inviter.id, user.id)
        return user

    async def _derive_username(self, users: UserRepository, email: str) -> str:
        base = re.sub(r"[^a-z0-9_.-]", "", email.split("@", 1)[0].lower()) or "client"
        candidate = base
        while await users.get_by_username(candidate) is not None:
            candidate = f"{base}-{secrets.token_hex(3)}"
        return candidate

    async def update_profile(self, db: AsyncSession, user_id: int, payload: ProfileUpdate) -> User:
        users = UserRepository(db)
        user = await self.get_user(db, user_id)
        values = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in values:
            await self._ensure_unique(users, email=values["email"], exclude_id=user.id)
        return await users.update(user, values)

    async def assign_therapist(
        self, db: AsyncSession, user_id: int, therapist_id: Optional[int]
    ) -> User:
        users = UserRepository(db)
        user = await self.get_user(db, user_id)
        if user.role != Role.CLIENT.value:
            raise ValidationError("Only clients can be assigned a therapist", field="userId")
        if therapist_id is not None:
            await self._require_therapist(users, therapist_id)
        logger.info("Client %s reassigned to therapist %s", user_id, therapist_id)
        return await users.update(user, {"therapist_id": therapist_id})

    async def set_current_viewing_client(
        self, db: AsyncSession, principal: Principal, client_id: Optional[int]
    ) -> Optional[User]:
        """Points a therapist/admin's UI at one client. Returns that client (or None)."""
        client = None
        if client_id is not None:
            await check_user_access(db, principal, client_id)
            client = await self.get_user(db, client_id)
        me = await self.get_user(db, principal.id)
        await UserRepository(db).update(me, {"current_viewing_client_id": client_id})
        return client

    async def assign_subscription(self, db: AsyncSession, user_id: int, plan_id: int) -> User:
        user = await self.get_user(db, user_id)
        plan = await db.get(SubscriptionPlan, plan_id)
        if plan is None or not plan.is_active:
            raise ValidationError("Subscription plan not found or inactive", field="planId")
        return await UserRepository(db).update(
            user, {"subscription_plan_id": plan.id, "subscription_status": "active"}
        )

    # ── Deletion ──────────────────────────────────────────────────────────

    async def delete_user(self, db: AsyncSession, principal: Principal, user_id: int) -> None:
        if principal.id == user_id:
            raise ValidationError("You cannot delete your own account", field="userId")
        await self.get_user(db, user_id)

        try:
            await self._delete_owned_records(db, user_id)
            await UserRepository(db).detach_references(user_id)
            await db.execute(delete(User).where(User.id == user_id))
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "delete_user", "user_id": user_id}) from e

        logger.info("User %s deleted by admin %s", user_id, principal.id)

    async def _delete_owned_records(self, db: AsyncSession, user_id: int) -> None:
        await SessionStore(db).delete_for_user(user_id)

        # Thought records owned by the user or hanging off the user's emotion records
        emotion_ids = select(EmotionRecord.id).where(EmotionRecord.user_id == user_id)
        thought_ids = select(ThoughtRecord.id).where(
            or_(ThoughtRecord.user_id == user_id, ThoughtRecord.emotion_record_id.in_(emotion_ids))
        )
        factor_ids = select(ProtectiveFactor.id).where(ProtectiveFactor.user_id == user_id)
        strategy_ids = select(CopingStrategy.id).where(CopingStrategy.user_id == user_id)

        await db.execute(
            delete(ProtectiveFactorUsage).where(
                or_(
                    ProtectiveFactorUsage.user_id == user_id,
                    ProtectiveFactorUsage.thought_record_id.in_(thought_ids),
                    ProtectiveFactorUsage.protective_factor_id.in_(factor_ids),
                )
            )
        )
        await db.execute(
            delete(CopingStrategyUsage).where(
                or_(
                    CopingStrategyUsage.user_id == user_id,
                    CopingStrategyUsage.thought_record_id.in_(thought_ids),
                    CopingStrategyUsage.coping_strategy_id.in_(strategy_ids),
                )
            )
        )
        await db.execute(delete(ThoughtRecord).where(ThoughtRecord.id.in_(thought_ids)))
        await db.execute(delete(EmotionRecord).where(EmotionRecord.user_id == user_id))
        await db.execute(delete(ProtectiveFactor).where(ProtectiveFactor.user_id == user_id))
        await db.execute(delete(CopingStrategy).where(CopingStrategy.user_id == user_id))

        goal_ids = select(Goal.id).where(Goal.user_id == user_id)
        await db.execute(delete(GoalMilestone).where(GoalMilestone.goal_id.in_(goal_ids)))
        await db.execute(delete(Goal).where(Goal.user_id == user_id))
        await db.execute(delete(Action).where(Action.user_id == user_id))

        entry_ids = select(JournalEntry.id).where(JournalEntry.user_id == user_id)
        await db.execute(
            delete(JournalComment).where(
                or_(
                    JournalComment.journal_entry_id.in_(entry_ids),
                    JournalComment.user_id == user_id,
                    JournalComment.therapist_id == user_id,
                )
            )
        )
        await db.execute(delete(JournalEntry).where(JournalEntry.user_id == user_id))

        resource_ids = select(Resource.id).where(Resource.created_by == user_id)
        await db.execute(
            delete(ResourceAssignment).where(
                or_(
                    ResourceAssignment.assigned_to == user_id,
                    ResourceAssignment.assigned_by == user_id,
                    ResourceAssignment.resource_id.in_(resource_ids),
                )
            )
        )
        await db.execute(
            delete(ResourceFeedback).where(
                or_(
                    ResourceFeedback.user_id == user_id,
                    ResourceFeedback.resource_id.in_(resource_ids),
                )
            )
        )
        await db.execute(delete(Resource).where(Resource.created_by == user_id))


# Module-level singleton
user_service = UserService()
