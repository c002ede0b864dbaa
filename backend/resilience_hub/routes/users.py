"""
ResilienceHub Backend — User Management Routes
==============================================

Route Inventory:
    GET    /api/users                              admin
    GET    /api/users/clients                      therapist (or admin)
    POST   /api/users/invite-client                therapist (or admin)
    GET    /api/users/current-viewing-client       therapist (or admin)
    PUT    /api/users/current-viewing-client       therapist (or admin)
    GET    /api/users/{user_id}                    access scope
    PATCH  /api/users/{user_id}                    access scope (name, email)
    PATCH  /api/users/{user_id}/therapist          admin
    PATCH  /api/users/{user_id}/subscription       admin
    DELETE /api/users/{user_id}                    admin (cascading)

The fixed paths are declared before `/{user_id}` so they are matched first.
Every mutation that changes a principal's fields commits and then evicts
that user's cached sessions, so the next request re-reads the committed row.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import (
    authorize_user_scope,
    get_session_cache,
    require_admin,
    require_therapist,
)
from resilience_hub.database import get_db_session
from resilience_hub.exceptions import AuthorizationError
from resilience_hub.repositories import UserRepository
from resilience_hub.schemas.common import MessageResponse
from resilience_hub.schemas.users import (
    CurrentViewingClientResponse,
    CurrentViewingClientUpdate,
    InviteClientRequest,
    ProfileUpdate,
    SubscriptionAssignment,
    TherapistAssignment,
    UserResponse,
)
from resilience_hub.services.session_cache import SessionCache
from resilience_hub.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


async def _commit_and_evict(
    db: AsyncSession, cache: Optional[SessionCache], user_id: int
) -> None:
    # Eviction must follow the commit
    await db.commit()
    if cache is not None:
        cache.invalidate_user(user_id)


# ── Collection & fixed paths ──────────────────────────────────────────────

@router.get("", response_model=List[UserResponse], summary="List all users")
async def list_users(
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    users = await UserRepository(db).list_all()
    return [UserResponse.model_validate(u) for u in users]


@router.get("/clients", response_model=List[UserResponse], summary="List a therapist's clients")
async def list_clients(
    therapist_id: Optional[int] = Query(default=None, alias="therapistId"),
    principal: Principal = Depends(require_therapist),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    owner_id = principal.id
    if therapist_id is not None and therapist_id != principal.id:
        if not principal.is_admin:
            raise AuthorizationError("Access denied.")
        owner_id = therapist_id
    clients = await UserRepository(db).list_clients(owner_id)
    return [UserResponse.model_validate(c) for c in clients]


@router.post(
    "/invite-client",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": MessageResponse}},
    summary="Create a pending client account bound to the inviting therapist",
)
async def invite_client(
    payload: InviteClientRequest,
    principal: Principal = Depends(require_therapist),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.invite_client(db, principal, payload)
    return UserResponse.model_validate(user)


@router.get("/current-viewing-client", response_model=CurrentViewingClientResponse)
async def get_current_viewing_client(
    principal: Principal = Depends(require_therapist),
    db: AsyncSession = Depends(get_db_session),
) -> CurrentViewingClientResponse:
    users = UserRepository(db)
    me = await users.get_by_id(principal.id)
    client_id = me.current_viewing_client_id if me is not None else None
    client = await users.get_by_id(client_id) if client_id is not None else None
    return CurrentViewingClientResponse(
        client_id=client_id,
        client=UserResponse.model_validate(client) if client is not None else None,
    )


@router.put("/current-viewing-client", response_model=CurrentViewingClientResponse)
async def set_current_viewing_client(
    payload: CurrentViewingClientUpdate,
    principal: Principal = Depends(require_therapist),
    cache: Optional[SessionCache] = Depends(get_session_cache),
    db: AsyncSession = Depends(get_db_session),
) -> CurrentViewingClientResponse:
    client = await user_service.set_current_viewing_client(db, principal, payload.client_id)
    await _commit_and_evict(db, cache, principal.id)
    return CurrentViewingClientResponse(
        client_id=payload.client_id,
        client=UserResponse.model_validate(client) if client is not None else None,
    )


# ── Single user ───────────────────────────────────────────────────────────

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return UserResponse.model_validate(await user_service.get_user(db, user_id))


@router.patch("/{user_id}", response_model=UserResponse, summary="Update name / email")
async def update_user(
    user_id: int,
    payload: ProfileUpdate,
    _: Principal = Depends(authorize_user_scope),
    cache: Optional[SessionCache] = Depends(get_session_cache),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.update_profile(db, user_id, payload)
    await _commit_and_evict(db, cache, user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}/therapist", response_model=UserResponse)
async def assign_therapist(
    user_id: int,
    payload: TherapistAssignment,
    _: Principal = Depends(require_admin),
    cache: Optional[SessionCache] = Depends(get_session_cache),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.assign_therapist(db, user_id, payload.therapist_id)
    await _commit_and_evict(db, cache, user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}/subscription", response_model=UserResponse)
async def assign_subscription(
    user_id: int,
    payload: SubscriptionAssignment,
    _: Principal = Depends(require_admin),
    cache: Optional[SessionCache] = Depends(get_session_cache),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.assign_subscription(db, user_id, payload.plan_id)
    await _commit_and_evict(db, cache, user_id)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    principal: Principal = Depends(require_admin),
    cache: Optional[SessionCache] = Depends(get_session_cache),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await user_service.delete_user(db, principal, user_id)
    await _commit_and_evict(db, cache, user_id)
    return MessageResponse(message="User deleted successfully")
