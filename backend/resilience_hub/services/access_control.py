"""
ResilienceHub Backend — Access-Scope Resolver
=============================================

What:  Decides whether an authenticated principal may act on a target user's data.
How:   One canonical decision procedure with a fixed precedence, parameterized
       by the purpose of the check (read vs create) and by an optional
       therapist self-target exclusion used for feedback operations.
Who:   Route dependencies (`auth.dependencies`) and handlers that load a record
       first and then authorize against its owner.

Precedence (first matching rule decides):
    1. principal is admin                               → ALLOW
    2. exclusion enabled, therapist targeting own id    → DENY (feedback message)
    3. principal.id == target                           → ALLOW
    4. principal is therapist and target.therapist_id
       == principal.id                                  → ALLOW
    5. otherwise                                        → DENY

    A missing target user is a DENY with the same message as an unrelated one,
    so the check never reveals whether a user id exists. A failure while
    loading the target is a DatabaseError (500), never a DENY.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.exceptions import AuthorizationError, DatabaseError
from resilience_hub.models import Role
from resilience_hub.repositories import UserRepository

logger = logging.getLogger(__name__)


class AccessPurpose(str, Enum):
    READ = "read"
    CREATE = "create"


# Denial reasons per purpose: (therapist without the relationship, anyone else)
_DENY_MESSAGES = {
    AccessPurpose.READ: (
        "Access denied. Not your client.",
        "Access denied.",
    ),
    AccessPurpose.CREATE: (
        "Access denied. You can only create resources for your own clients.",
        "Access denied. You can only create resources for yourself.",
    ),
}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "AccessDecision":
        return cls(allowed=False, reason=reason)


class AccessResolver:
    """
    Evaluates the therapist–client–admin relation for one request.

    Args:
        users: repository used to fetch the target user when the principal is
               a therapist acting on someone else.
    """

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    @classmethod
    def for_session(cls, db: AsyncSession) -> "AccessResolver":
        return cls(UserRepository(db))

    async def decide(
        self,
        principal: Principal,
        target_user_id: int,
        purpose: AccessPurpose = AccessPurpose.READ,
        therapist_self_exclusion: Optional[str] = None,
    ) -> AccessDecision:
        therapist_denial, default_denial = _DENY_MESSAGES[purpose]
        role = principal.role

        if role is Role.ADMIN:
            return AccessDecision.allow()

        if (
            therapist_self_exclusion is not None
            and role is Role.THERAPIST
            and principal.id == target_user_id
        ):
            return AccessDecision.deny(therapist_self_exclusion)

        if principal.id == target_user_id:
            return AccessDecision.allow()

        if role is Role.THERAPIST:
            try:
                target = await self._users.get_by_id(target_user_id)
            except SQLAlchemyError as e:
                logger.error(
                    "Failed to load target user %s for access check: %s", target_user_id, str(e)
                )
                raise DatabaseError(
                    context={"operation": "access_check", "target_user_id": target_user_id}
                ) from e
            if target is not None and target.therapist_id == principal.id:
                return AccessDecision.allow()
            return AccessDecision.deny(therapist_denial)

        if role is Role.CLIENT:
            return AccessDecision.deny(default_denial)

        raise AssertionError(f"Unhandled role: {role!r}")

    async def require(
        self,
        principal: Principal,
        target_user_id: int,
        purpose: AccessPurpose = AccessPurpose.READ,
        therapist_self_exclusion: Optional[str] = None,
    ) -> None:
        """Raises AuthorizationError (403) unless `decide` allows."""
        decision = await self.decide(principal, target_user_id, purpose, therapist_self_exclusion)
        if decision.allowed:
            logger.debug(
                "Access allowed: user %s (%s) → target %s [%s]",
                principal.id, principal.role.value, target_user_id, purpose.value,
            )
            return
        logger.info(
            "Access denied: user %s (%s) → target %s [%s]: %s",
            principal.id, principal.role.value, target_user_id, purpose.value, decision.reason,
        )
        raise AuthorizationError(
            decision.reason,
            context={"principal_id": principal.id, "target_user_id": target_user_id},
        )


# ── Call-site helpers ─────────────────────────────────────────────────────

async def check_user_access(db: AsyncSession, principal: Principal, target_user_id: int) -> None:
    """Read/write access to a target user's data."""
    await AccessResolver.for_session(db).require(principal, target_user_id)


async def check_resource_creation_permission(
    db: AsyncSession, principal: Principal, target_user_id: int
) -> None:
    """Creating a resource on behalf of `target_user_id`."""
    await AccessResolver.for_session(db).require(
        principal, target_user_id, purpose=AccessPurpose.CREATE
    )


async def authorize_feedback(
    db: AsyncSession, principal: Principal, owner_id: int, exclusion_message: str
) -> None:
    """
    Mutating feedback operations (goal status, milestones, action completion).

    Same rules as `check_user_access`, except a therapist is denied on records
    they own themselves: therapists only give feedback on their clients' records.
    """
    await AccessResolver.for_session(db).require(
        principal, owner_id, therapist_self_exclusion=exclusion_message
    )
