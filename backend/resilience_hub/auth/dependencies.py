"""
ResilienceHub Backend — Auth Dependencies
=========================================

What:  FastAPI dependencies composing Authenticator → Role Gates → Access scope.
How:   Each dependency returns the principal (or the full AuthContext) so a
       route declares its whole chain in its signature, e.g.:

           async def create_goal(
               user_id: int,
               principal: Principal = Depends(authorize_client_record_creation),
               db: AsyncSession = Depends(get_db_session),
           ): ...

       FastAPI caches dependency results per request, so the authenticator
       runs once even when several dependencies need the principal.

Path parameter convention:
    Scope dependencies read the target from the `user_id` path parameter.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import AuthContext, Principal
from resilience_hub.auth.gates import ensure_admin, ensure_client_or_admin, ensure_therapist
from resilience_hub.config import settings
from resilience_hub.database import get_db_session
from resilience_hub.services.access_control import (
    check_resource_creation_permission,
    check_user_access,
)
from resilience_hub.services.authenticator import Authenticator
from resilience_hub.services.session_cache import SessionCache


def get_session_cache(request: Request) -> Optional[SessionCache]:
    """The application's session cache, or None when caching is disabled."""
    return getattr(request.app.state, "session_cache", None)


async def authenticate_request(
    request: Request, db: AsyncSession, cache: Optional[SessionCache]
) -> AuthContext:
    """Runs the Authenticator on the request's session cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    return await Authenticator.for_session(db, cache).authenticate(token)


async def get_auth_context(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    cache: Optional[SessionCache] = Depends(get_session_cache),
) -> AuthContext:
    return await authenticate_request(request, db, cache)


async def get_principal(context: AuthContext = Depends(get_auth_context)) -> Principal:
    return context.principal


# ── Role gates ────────────────────────────────────────────────────────────

async def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    return ensure_admin(principal)


async def require_therapist(principal: Principal = Depends(get_principal)) -> Principal:
    return ensure_therapist(principal)


async def require_client_or_admin(principal: Principal = Depends(get_principal)) -> Principal:
    return ensure_client_or_admin(principal)


# ── Access scope on /api/users/{user_id}/... ──────────────────────────────

async def authorize_user_scope(
    user_id: int,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Principal:
    await check_user_access(db, principal, user_id)
    return principal


async def authorize_resource_creation(
    user_id: int,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Principal:
    await check_resource_creation_permission(db, principal, user_id)
    return principal


async def authorize_client_record_creation(
    principal: Principal = Depends(authorize_user_scope),
) -> Principal:
    """Access scope first, then the client-or-admin gate."""
    return ensure_client_or_admin(principal)
