"""
ResilienceHub Backend — Base Repository
=======================================

What:  Generic async get/create/update/delete over one ORM model.
How:   Wraps an AsyncSession; writes are flushed (not committed) so they join
       the request transaction owned by `get_db_session`.
Who:   Subclassed by the user and session repositories; used directly for
       the owned-record families (`BaseRepository(EmotionRecord, db)`).
"""

from typing import Any, Dict, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Generic repository with async CRUD operations.

    Usage:
        repo = BaseRepository(Goal, db)
        goal = await repo.get_by_id(goal_id)
        goals = await repo.list_by(user_id=10, order_by=Goal.created_at.desc())
    """

    def __init__(self, model: Type[ModelT], session: AsyncSession) -> None:
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get_by_id(self, id: Any) -> Optional[ModelT]:
        return await self._session.get(self._model, id)

    async def list_by(
        self,
        *,
        order_by: Any = None,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> Sequence[ModelT]:
        """Lists rows matching equality filters on column attributes."""
        query = select(self._model)
        for column, value in filters.items():
            query = query.where(getattr(self._model, column) == value)
        if order_by is not None:
            query = query.order_by(order_by)
        if limit is not None:
            query = query.limit(limit)
        result = await self._session.execute(query)
        return result.scalars().all()

    async def create(self, entity: ModelT) -> ModelT:
        self._session.add(entity)
        await self._session.flush()
        await self._session.refresh(entity)
        return entity

    async def update(self, entity: ModelT, values: Dict[str, Any]) -> ModelT:
        """Applies `values` to an already-loaded entity and flushes."""
        for key, value in values.items():
            setattr(entity, key, value)
        await self._session.flush()
        await self._session.refresh(entity)
        return entity

    async def delete(self, id: Any) -> bool:
        """
        Delete entity by primary key.

        Returns:
            True if a row was deleted, False if it did not exist
        """
        result = await self._session.execute(
            delete(self._model).where(self._model.id == id)
        )
        return result.rowcount > 0

    async def delete_where(self, *criteria: Any) -> int:
        result = await self._session.execute(delete(self._model).where(*criteria))
        return result.rowcount or 0

    async def count(self, **filters: Any) -> int:
        query = select(func.count()).select_from(self._model)
        for column, value in filters.items():
            query = query.where(getattr(self._model, column) == value)
        result = await self._session.execute(query)
        return result.scalar_one()

    async def exists(self, id: Any) -> bool:
        result = await self._session.execute(
            select(func.count()).select_from(self._model).where(self._model.id == id)
        )
        return result.scalar_one() > 0
