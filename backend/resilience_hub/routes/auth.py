"""
ResilienceHub Backend — Authentication Routes
=============================================

What:  Register, login, logout and "who am I".
How:   Register/login open a session through SessionStore and issue the
       session cookie; logout deletes the session, evicts it from the cache
       and clears the cookie with the same attributes it was issued with.

Route Inventory:
    POST /api/auth/register   public      201 + cookie
    POST /api/auth/login      public      200 + cookie (30 days with rememberMe)
    POST /api/auth/logout     session     clears cookie
    GET  /api/auth/me         session     principal without password

Register and login are additionally throttled per client IP by
RateLimitMiddleware (AUTH_RATE_LIMIT_REQUESTS per AUTH_RATE_LIMIT_WINDOW).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import AuthContext, Principal
from resilience_hub.auth.cookies import clear_session_cookie, set_session_cookie
from resilience_hub.auth.dependencies import get_auth_context, get_principal, get_session_cache
from resilience_hub.database import get_db_session
from resilience_hub.schemas.common import MessageResponse
from resilience_hub.schemas.users import LoginRequest, RegisterRequest, UserResponse
from resilience_hub.services.session_cache import SessionCache
from resilience_hub.services.session_store import SessionStore
from resilience_hub.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": MessageResponse},
        403: {"model": MessageResponse},
        409: {"model": MessageResponse},
    },
    summary="Create a client or therapist account and sign in",
)
async def register(
    payload: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user, session = await user_service.register(db, payload)
    set_session_cookie(response, session.id)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"model": MessageResponse}},
    summary="Sign in with username and password",
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user, session = await user_service.login(
        db, payload.username, payload.password, remember=payload.remember_me
    )
    set_session_cookie(response, session.id, remember=payload.remember_me)
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse, summary="End the current session")
async def logout(
    response: Response,
    context: AuthContext = Depends(get_auth_context),
    cache: Optional[SessionCache] = Depends(get_session_cache),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    token = context.session.token
    await SessionStore(db).delete(token)
    if cache is not None:
        cache.delete(token)
    clear_session_cookie(response)
    logger.info("User %s logged out", context.principal.id)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse, summary="The authenticated user")
async def me(principal: Principal = Depends(get_principal)) -> UserResponse:
    return UserResponse.model_validate(principal)
