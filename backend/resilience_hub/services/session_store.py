"""
ResilienceHub Backend — Session Store
=====================================

What:  Persists opaque session tokens mapped to a user id and an absolute expiry.
How:   Thin service over SessionRepository. Token creation and deletion commit
       immediately: a session is its own unit of work, independent of the
       request transaction that happens to carry it.
Who:   The Authenticator (lookup / expired-session deletion) and the auth
       routes (login, register, logout).

Validity rule:
    A session is valid iff its row exists AND `expires_at` is in the future.
    An expired session is deleted the first time it is presented.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.config import settings
from resilience_hub.database import as_utc, utcnow
from resilience_hub.exceptions import DatabaseError
from resilience_hub.models import Session
from resilience_hub.repositories import SessionRepository

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_token() -> str:
    """URL-safe random token (~43 characters, 256 bits of entropy)."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class SessionStore:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow) -> None:
        self._db = db
        self._repo = SessionRepository(db)
        self._clock = clock

    def lifetime(self, remember: bool = False) -> timedelta:
        days = settings.remember_me_ttl_days if remember else settings.session_ttl_days
        return timedelta(days=days)

    def is_expired(self, session: Session) -> bool:
        return as_utc(session.expires_at) <= self._clock()

    async def create(self, user_id: int, remember: bool = False) -> Session:
        session = Session(
            id=generate_token(),
            user_id=user_id,
            expires_at=self._clock() + self.lifetime(remember),
        )
        try:
            self._db.add(session)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("Failed to create session for user %s: %s", user_id, str(e))
            raise DatabaseError(context={"operation": "create_session", "user_id": user_id}) from e
        logger.debug("Session %s… created for user %s", session.id[:8], user_id)
        return session

    async def get(self, token: str) -> Optional[Session]:
        try:
            return await self._repo.get_by_id(token)
        except SQLAlchemyError as e:
            logger.error("Failed to load session %s…: %s", token[:8], str(e))
            raise DatabaseError(context={"operation": "get_session"}) from e

    async def delete(self, token: str) -> bool:
        """Deletes the session if present. Deleting a missing token is not an error."""
        try:
            deleted = await self._repo.delete(token)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("Failed to delete session %s…: %s", token[:8], str(e))
            raise DatabaseError(context={"operation": "delete_session"}) from e
        return deleted

    async def delete_for_user(self, user_id: int) -> int:
        """Removes all of a user's sessions within the caller's transaction."""
        return await self._repo.delete_for_user(user_id)

    async def purge_expired(self) -> int:
        try:
            removed = await self._repo.delete_expired(self._clock())
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise DatabaseError(context={"operation": "purge_expired_sessions"}) from e
        if removed:
            logger.info("Purged %d expired sessions", removed)
        return removed
