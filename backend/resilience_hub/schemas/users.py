"""
ResilienceHub Backend — User & Auth Schemas
===========================================

What:  Request bodies for registration, login and user management, and the
       outbound user representation.

Security:
    No response schema in this module has a `password` field. Routes always
    declare `response_model`, so a hash can never be serialized by accident.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from resilience_hub.models import Role
from resilience_hub.schemas.common import CamelModel


def _check_email(value: str) -> str:
    value = value.strip()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid email address")
    return value.lower()


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(CamelModel):
    """Public view of a user (or of the authenticated principal)."""

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
    subscription_end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CurrentViewingClientResponse(CamelModel):
    client_id: Optional[int] = None
    client: Optional[UserResponse] = None


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=100)
    email: str = Field(max_length=255)
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    role: Role = Role.CLIENT
    therapist_id: Optional[int] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    remember_me: bool = False


class InviteClientRequest(CamelModel):
    email: str = Field(max_length=255)
    name: str = Field(min_length=1, max_length=255)
    username: Optional[str] = Field(default=None, min_length=3, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class ProfileUpdate(CamelModel):
    """Self-service profile edits. Role, therapist and status are not editable here."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_email(v)


class TherapistAssignment(CamelModel):
    therapist_id: Optional[int] = None


class CurrentViewingClientUpdate(CamelModel):
    client_id: Optional[int] = None


class SubscriptionAssignment(CamelModel):
    plan_id: int
