"""Small helpers shared by the owned-record routers."""

from typing import Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.database import Base
from resilience_hub.exceptions import AuthorizationError, NotFoundError
from resilience_hub.repositories import BaseRepository

ModelT = TypeVar("ModelT", bound=Base)


async def load_or_404(db: AsyncSession, model: Type[ModelT], record_id: int, label: str) -> ModelT:
    record = await BaseRepository(model, db).get_by_id(record_id)
    if record is None:
        raise NotFoundError(resource=label, resource_id=record_id)
    return record


async def load_owned(
    db: AsyncSession, model: Type[ModelT], record_id: int, user_id: int, label: str
) -> ModelT:
    """Loads a record addressed under /api/users/{user_id}/...; it must belong to that user."""
    record = await load_or_404(db, model, record_id, label)
    if record.user_id != user_id:
        raise AuthorizationError("Access denied.")
    return record
