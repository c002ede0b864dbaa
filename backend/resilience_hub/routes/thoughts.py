"""
ResilienceHub Backend — Thought Record Routes
=============================================

Route Inventory:
    GET    /api/users/{user_id}/thoughts                 access scope (?emotionRecordId=)
    POST   /api/users/{user_id}/thoughts                 access scope → client-or-admin
    GET    /api/users/{user_id}/thoughts/ratings         access scope (?days=30)
    DELETE /api/users/{user_id}/thoughts/{thought_id}    access scope (cascades usage rows)
    GET    /api/thoughts/{thought_id}                    session; 404, then owner access scope
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import (
    authorize_client_record_creation,
    authorize_user_scope,
    get_principal,
)
from resilience_hub.database import get_db_session
from resilience_hub.models import EmotionRecord, ThoughtRecord
from resilience_hub.repositories import BaseRepository
from resilience_hub.routes.common import load_or_404, load_owned
from resilience_hub.schemas.common import MessageResponse
from resilience_hub.schemas.records import RatingPoint, ThoughtRecordCreate, ThoughtRecordResponse
from resilience_hub.services.access_control import check_user_access
from resilience_hub.services.record_service import record_service

router = APIRouter(prefix="/api", tags=["Thoughts"])


@router.get("/users/{user_id}/thoughts", response_model=List[ThoughtRecordResponse])
async def list_thoughts(
    user_id: int,
    emotion_record_id: Optional[int] = Query(default=None, alias="emotionRecordId"),
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> List[ThoughtRecordResponse]:
    filters = {"user_id": user_id}
    if emotion_record_id is not None:
        filters["emotion_record_id"] = emotion_record_id
    records = await BaseRepository(ThoughtRecord, db).list_by(
        order_by=ThoughtRecord.created_at.desc(), **filters
    )
    return [ThoughtRecordResponse.model_validate(r) for r in records]


@router.post(
    "/users/{user_id}/thoughts",
    response_model=ThoughtRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_thought(
    user_id: int,
    payload: ThoughtRecordCreate,
    _: Principal = Depends(authorize_client_record_creation),
    db: AsyncSession = Depends(get_db_session),
) -> ThoughtRecordResponse:
    if payload.emotion_record_id is not None:
        await load_owned(db, EmotionRecord, payload.emotion_record_id, user_id, "Emotion record")
    record = await BaseRepository(ThoughtRecord, db).create(
        ThoughtRecord(user_id=user_id, **payload.model_dump())
    )
    return ThoughtRecordResponse.model_validate(record)


@router.get("/users/{user_id}/thoughts/ratings", response_model=List[RatingPoint])
async def thought_ratings(
    user_id: int,
    days: int = Query(default=30, ge=1, le=365),
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> List[RatingPoint]:
    return await record_service.thought_ratings(db, user_id, days)


@router.delete("/users/{user_id}/thoughts/{thought_id}", response_model=MessageResponse)
async def delete_thought(
    user_id: int,
    thought_id: int,
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await load_owned(db, ThoughtRecord, thought_id, user_id, "Thought record")
    await record_service.delete_thought_record(db, thought_id)
    return MessageResponse(message="Thought record deleted successfully")


@router.get("/thoughts/{thought_id}", response_model=ThoughtRecordResponse)
async def get_thought(
    thought_id: int,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ThoughtRecordResponse:
    record = await load_or_404(db, ThoughtRecord, thought_id, "Thought record")
    await check_user_access(db, principal, record.user_id)
    return ThoughtRecordResponse.model_validate(record)
