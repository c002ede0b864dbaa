"""
ResilienceHub Backend — Protective Factor & Coping Strategy Routes
==================================================================

Both families share one shape, so their routes are built by
`_library_routes()` from a small descriptor:

    GET    /api/users/{user_id}/{family}                     access scope (?includeGlobal=true)
    POST   /api/users/{user_id}/{family}                     creation permission
    DELETE /api/users/{user_id}/{family}/{item_id}           access scope; global rows admin only
    POST   /api/users/{user_id}/{family}-usage               creation permission
    GET    /api/users/{user_id}/thoughts/{thought_id}/{family}   access scope

where {family} is `protective-factors` or `coping-strategies`.
"""

from dataclasses import dataclass
from typing import List, Type

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import authorize_resource_creation, authorize_user_scope
from resilience_hub.database import Base, get_db_session
from resilience_hub.exceptions import AuthorizationError, NotFoundError
from resilience_hub.models import (
    CopingStrategy,
    CopingStrategyUsage,
    ProtectiveFactor,
    ProtectiveFactorUsage,
    ThoughtRecord,
)
from resilience_hub.repositories import BaseRepository
from resilience_hub.routes.common import load_or_404
from resilience_hub.schemas.common import MessageResponse
from resilience_hub.schemas.records import (
    CopingStrategyUsageCreate,
    CopingStrategyUsageResponse,
    LibraryItemCreate,
    LibraryItemResponse,
    ProtectiveFactorUsageCreate,
    ProtectiveFactorUsageResponse,
)

router = APIRouter(prefix="/api", tags=["Library"])


@dataclass(frozen=True)
class LibraryFamily:
    path: str
    label: str
    model: Type[Base]
    usage_model: Type[Base]
    usage_fk: str
    usage_create: Type[BaseModel]
    usage_response: Type[BaseModel]


PROTECTIVE_FACTORS = LibraryFamily(
    path="protective-factors",
    label="Protective factor",
    model=ProtectiveFactor,
    usage_model=ProtectiveFactorUsage,
    usage_fk="protective_factor_id",
    usage_create=ProtectiveFactorUsageCreate,
    usage_response=ProtectiveFactorUsageResponse,
)

COPING_STRATEGIES = LibraryFamily(
    path="coping-strategies",
    label="Coping strategy",
    model=CopingStrategy,
    usage_model=CopingStrategyUsage,
    usage_fk="coping_strategy_id",
    usage_create=CopingStrategyUsageCreate,
    usage_response=CopingStrategyUsageResponse,
)


async def _thought_of_user(db: AsyncSession, thought_id: int, user_id: int) -> ThoughtRecord:
    thought = await BaseRepository(ThoughtRecord, db).get_by_id(thought_id)
    if thought is None or thought.user_id != user_id:
        raise NotFoundError(resource="Thought record", resource_id=thought_id)
    return thought


def _library_routes(family: LibraryFamily) -> None:
    model = family.model
    usage_model = family.usage_model
    usage_fk = getattr(usage_model, family.usage_fk)

    @router.get(
        f"/users/{{user_id}}/{family.path}",
        response_model=List[LibraryItemResponse],
        name=f"list_{family.path}",
    )
    async def list_items(
        user_id: int,
        include_global: bool = Query(default=False, alias="includeGlobal"),
        _: Principal = Depends(authorize_user_scope),
        db: AsyncSession = Depends(get_db_session),
    ) -> List[LibraryItemResponse]:
        query = select(model).order_by(model.name)
        if include_global:
            query = query.where(or_(model.user_id == user_id, model.is_global.is_(True)))
        else:
            query = query.where(model.user_id == user_id)
        result = await db.execute(query)
        return [LibraryItemResponse.model_validate(i) for i in result.scalars().all()]

    @router.post(
        f"/users/{{user_id}}/{family.path}",
        response_model=LibraryItemResponse,
        status_code=status.HTTP_201_CREATED,
        name=f"create_{family.path}",
    )
    async def create_item(
        user_id: int,
        payload: LibraryItemCreate,
        principal: Principal = Depends(authorize_resource_creation),
        db: AsyncSession = Depends(get_db_session),
    ) -> LibraryItemResponse:
        owner_id = user_id
        if payload.is_global:
            if not principal.is_admin:
                raise AuthorizationError("Access denied. Only admins can create global entries.")
            owner_id = None
        item = await BaseRepository(model, db).create(
            model(user_id=owner_id, **payload.model_dump())
        )
        return LibraryItemResponse.model_validate(item)

    @router.delete(
        f"/users/{{user_id}}/{family.path}/{{item_id}}",
        response_model=MessageResponse,
        name=f"delete_{family.path}",
    )
    async def delete_item(
        user_id: int,
        item_id: int,
        principal: Principal = Depends(authorize_user_scope),
        db: AsyncSession = Depends(get_db_session),
    ) -> MessageResponse:
        item = await load_or_404(db, model, item_id, family.label)
        if item.user_id is None or item.is_global:
            if not principal.is_admin:
                raise AuthorizationError("Access denied. Only admins can delete global entries.")
        elif item.user_id != user_id:
            raise AuthorizationError("Access denied.")
        await db.execute(delete(usage_model).where(usage_fk == item_id))
        await BaseRepository(model, db).delete(item_id)
        return MessageResponse(message=f"{family.label} deleted successfully")

    @router.post(
        f"/users/{{user_id}}/{family.path}-usage",
        response_model=family.usage_response,
        status_code=status.HTTP_201_CREATED,
        name=f"record_{family.path}_usage",
    )
    async def record_usage(
        user_id: int,
        payload: family.usage_create,  # type: ignore[valid-type]
        _: Principal = Depends(authorize_resource_creation),
        db: AsyncSession = Depends(get_db_session),
    ):
        await _thought_of_user(db, payload.thought_record_id, user_id)
        item = await BaseRepository(model, db).get_by_id(getattr(payload, family.usage_fk))
        if item is None or not (item.is_global or item.user_id == user_id):
            raise NotFoundError(resource=family.label, resource_id=getattr(payload, family.usage_fk))
        usage = await BaseRepository(usage_model, db).create(
            usage_model(user_id=user_id, **payload.model_dump())
        )
        return family.usage_response.model_validate(usage)

    @router.get(
        f"/users/{{user_id}}/thoughts/{{thought_id}}/{family.path}",
        response_model=List[family.usage_response],  # type: ignore[valid-type]
        name=f"list_{family.path}_usage",
    )
    async def list_usage(
        user_id: int,
        thought_id: int,
        _: Principal = Depends(authorize_user_scope),
        db: AsyncSession = Depends(get_db_session),
    ):
        await _thought_of_user(db, thought_id, user_id)
        rows = await BaseRepository(usage_model, db).list_by(
            thought_record_id=thought_id, order_by=usage_model.created_at
        )
        return [family.usage_response.model_validate(r) for r in rows]


_library_routes(PROTECTIVE_FACTORS)
_library_routes(COPING_STRATEGIES)
