from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.models import Session
from resilience_hub.repositories.base import BaseRepository


class SessionRepository(BaseRepository[Session]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Session, session)

    async def delete_for_user(self, user_id: int) -> int:
        return await self.delete_where(Session.user_id == user_id)

    async def delete_expired(self, now: datetime) -> int:
        # "fetch": in-memory evaluation would compare naive SQLite values with an aware `now`
        result = await self._session.execute(
            delete(Session)
            .where(Session.expires_at <= now)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
