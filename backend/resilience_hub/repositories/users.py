from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.models import Role, User
from resilience_hub.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User lookups used by authentication, access checks and user management."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(User, session)

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_all(self) -> Sequence[User]:
        result = await self._session.execute(select(User).order_by(User.name))
        return result.scalars().all()

    async def list_clients(self, therapist_id: int) -> Sequence[User]:
        result = await self._session.execute(
            select(User)
            .where(User.therapist_id == therapist_id, User.role == Role.CLIENT.value)
            .order_by(User.name)
        )
        return result.scalars().all()

    async def detach_references(self, user_id: int) -> None:
        """Nulls every therapist / current-viewing pointer at `user_id`."""
        await self._session.execute(
            update(User).where(User.therapist_id == user_id).values(therapist_id=None)
        )
        await self._session.execute(
            update(User)
            .where(User.current_viewing_client_id == user_id)
            .values(current_viewing_client_id=None)
        )
