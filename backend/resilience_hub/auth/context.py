"""
ResilienceHub Backend — Authentication Context Types
====================================================

What:  Immutable value objects describing who is making a request.
How:   Built by the Authenticator from the ORM user and session rows and passed
       explicitly (via FastAPI dependencies) to gates, resolver and handlers.

Why immutable snapshots (not ORM rows):
    The session cache outlives the database session that loaded the user.
    A frozen dataclass can be shared between requests without lazy loads or
    accidental writes back into a unit of work.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from resilience_hub.models import Role, User


@dataclass(frozen=True)
class Principal:
    """The authenticated user for the duration of one request."""

    id: int
    username: str
    email: str
    name: str
    role: Role
    status: str
    therapist_id: Optional[int] = None
    current_viewing_client_id: Optional[int] = None
    subscription_plan_id: Optional[int] = None
    subscription_status: str = "inactive"
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            name=user.name,
            role=Role(user.role),
            status=user.status,
            therapist_id=user.therapist_id,
            current_viewing_client_id=user.current_viewing_client_id,
            subscription_plan_id=user.subscription_plan_id,
            subscription_status=user.subscription_status,
            created_at=user.created_at,
        )

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_therapist(self) -> bool:
        return self.role is Role.THERAPIST

    @property
    def is_client(self) -> bool:
        return self.role is Role.CLIENT


@dataclass(frozen=True)
class SessionView:
    """
    Read-only view of the session backing a request.

    `cached=True` means the view was synthesized from the session cache; its
    `expires_at` is then the earlier of the cache window and the stored expiry.
    """

    token: str
    user_id: int
    expires_at: datetime
    cached: bool = False


@dataclass(frozen=True)
class AuthContext:
    principal: Principal
    session: SessionView
