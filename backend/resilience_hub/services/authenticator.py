"""
ResilienceHub Backend — Authenticator
=====================================

What:  Resolves a request's session token into an AuthContext or fails.
How:   Session cache first, then the session store and the users table.
Who:   Called once per protected request by `auth.dependencies.get_auth_context`.

Resolution steps (first failure wins):
    1. No token                              → 401 "Authentication required"
    2. Cache hit (unexpired)                 → return cached principal
    3. Token not in store                    → 401 "Invalid session"   (+ clear cookie)
    4. Token expired                         → delete row, evict cache,
                                               401 "Session expired"   (+ clear cookie)
    5. Session's user no longer exists       → 401 "User not found"
    6. Success                               → populate cache, return context

Retrying an expired token: the first attempt deletes the row, a retry finds
no row. Both are 401 with the cookie cleared; the deletion is never attempted
twice, so a retry cannot surface a persistence error.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import AuthContext, Principal, SessionView
from resilience_hub.database import as_utc
from resilience_hub.exceptions import AuthenticationError, DatabaseError
from resilience_hub.repositories import UserRepository
from resilience_hub.services.session_cache import SessionCache
from resilience_hub.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class Authenticator:
    def __init__(
        self,
        store: SessionStore,
        users: UserRepository,
        cache: Optional[SessionCache] = None,
    ) -> None:
        self._store = store
        self._users = users
        self._cache = cache

    @classmethod
    def for_session(cls, db: AsyncSession, cache: Optional[SessionCache] = None) -> "Authenticator":
        return cls(store=SessionStore(db), users=UserRepository(db), cache=cache)

    async def authenticate(self, token: Optional[str]) -> AuthContext:
        if not token:
            raise AuthenticationError("Authentication required")

        if self._cache is not None:
            cached = self._cache.get(token)
            if cached is not None:
                return cached

        session = await self._store.get(token)
        if session is None:
            logger.debug("Rejected unknown session token %s…", token[:8])
            raise AuthenticationError("Invalid session", clear_cookie=True)

        if self._store.is_expired(session):
            await self._store.delete(token)
            if self._cache is not None:
                self._cache.delete(token)
            logger.debug("Rejected expired session %s… (user %s)", token[:8], session.user_id)
            raise AuthenticationError("Session expired", clear_cookie=True)

        try:
            user = await self._users.get_by_id(session.user_id)
        except SQLAlchemyError as e:
            logger.error("Failed to load user %s for session: %s", session.user_id, str(e))
            raise DatabaseError(context={"operation": "load_session_user"}) from e
        if user is None:
            raise AuthenticationError("User not found")

        principal = Principal.from_model(user)
        expires_at = as_utc(session.expires_at)
        if self._cache is not None:
            self._cache.set(token, principal, expires_at)

        return AuthContext(
            principal=principal,
            session=SessionView(token=token, user_id=user.id, expires_at=expires_at),
        )
