"""
ResilienceHub Backend — Role Gates
==================================

Pure predicates over an authenticated principal, applied after the
Authenticator. Each `ensure_*` raises AuthorizationError (403) on failure;
`auth.dependencies` wraps them as FastAPI dependencies.

    ensure_admin            role == admin
    ensure_therapist        role ∈ {therapist, admin}
    ensure_client_or_admin  role ∈ {client, admin}  (rejects therapists only)

The client-or-admin gate guards personal-record creation (emotions,
thoughts, goals, actions): a therapist never writes into a client's own
record, while an admin may for support and maintenance.
"""

import logging

from resilience_hub.auth.context import Principal
from resilience_hub.exceptions import AuthorizationError
from resilience_hub.models import Role

logger = logging.getLogger(__name__)

ADMIN_REQUIRED = "Access denied. Admin role required."
THERAPIST_REQUIRED = "Access denied. Therapist role required."
CLIENT_OR_ADMIN_REQUIRED = (
    "Therapists cannot create emotion or thought records. "
    "Only clients can record emotions and thoughts."
)


def _deny(principal: Principal, message: str) -> AuthorizationError:
    logger.info("Role gate denied user %s (%s): %s", principal.id, principal.role.value, message)
    return AuthorizationError(message, context={"principal_id": principal.id})


def ensure_admin(principal: Principal) -> Principal:
    if principal.role is not Role.ADMIN:
        raise _deny(principal, ADMIN_REQUIRED)
    return principal


def ensure_therapist(principal: Principal) -> Principal:
    if principal.role not in (Role.THERAPIST, Role.ADMIN):
        raise _deny(principal, THERAPIST_REQUIRED)
    return principal


def ensure_client_or_admin(principal: Principal) -> Principal:
    if principal.role is Role.THERAPIST:
        raise _deny(principal, CLIENT_OR_ADMIN_REQUIRED)
    return principal
