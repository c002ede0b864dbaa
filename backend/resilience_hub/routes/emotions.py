"""
ResilienceHub Backend — Emotion Record Routes
=============================================

Route Inventory:
    GET    /api/users/{user_id}/emotions               access scope
    POST   /api/users/{user_id}/emotions               access scope → client-or-admin
    GET    /api/users/{user_id}/emotions/stats         access scope
    DELETE /api/users/{user_id}/emotions/{emotion_id}  access scope (cascades thoughts)
    GET    /api/emotions/{emotion_id}                  session; 404, then owner access scope
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import (
    authorize_client_record_creation,
    authorize_user_scope,
    get_principal,
)
from resilience_hub.database import as_utc, get_db_session, utcnow
from resilience_hub.models import EmotionRecord
from resilience_hub.repositories import BaseRepository
from resilience_hub.routes.common import load_or_404, load_owned
from resilience_hub.schemas.common import MessageResponse
from resilience_hub.schemas.records import EmotionRecordCreate, EmotionRecordResponse, EmotionStat
from resilience_hub.services.access_control import check_user_access
from resilience_hub.services.record_service import record_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Emotions"])


@router.get("/users/{user_id}/emotions", response_model=List[EmotionRecordResponse])
async def list_emotions(
    user_id: int,
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> List[EmotionRecordResponse]:
    records = await BaseRepository(EmotionRecord, db).list_by(
        user_id=user_id, order_by=EmotionRecord.timestamp.desc()
    )
    return [EmotionRecordResponse.model_validate(r) for r in records]


@router.post(
    "/users/{user_id}/emotions",
    response_model=EmotionRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_emotion(
    user_id: int,
    payload: EmotionRecordCreate,
    _: Principal = Depends(authorize_client_record_creation),
    db: AsyncSession = Depends(get_db_session),
) -> EmotionRecordResponse:
    values = payload.model_dump()
    values["timestamp"] = as_utc(payload.timestamp) or utcnow()
    record = await BaseRepository(EmotionRecord, db).create(EmotionRecord(user_id=user_id, **values))
    return EmotionRecordResponse.model_validate(record)


@router.get("/users/{user_id}/emotions/stats", response_model=List[EmotionStat])
async def emotion_stats(
    user_id: int,
    days: int = Query(default=30, ge=1, le=365),
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> List[EmotionStat]:
    return await record_service.emotion_stats(db, user_id, days)


@router.delete("/users/{user_id}/emotions/{emotion_id}", response_model=MessageResponse)
async def delete_emotion(
    user_id: int,
    emotion_id: int,
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await load_owned(db, EmotionRecord, emotion_id, user_id, "Emotion record")
    await record_service.delete_emotion_record(db, emotion_id)
    return MessageResponse(message="Emotion record deleted successfully")


@router.get("/emotions/{emotion_id}", response_model=EmotionRecordResponse)
async def get_emotion(
    emotion_id: int,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> EmotionRecordResponse:
    record = await load_or_404(db, EmotionRecord, emotion_id, "Emotion record")
    await check_user_access(db, principal, record.user_id)
    return EmotionRecordResponse.model_validate(record)
