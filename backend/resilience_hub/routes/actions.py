"""
ResilienceHub Backend — Action Routes
=====================================

Route Inventory:
    GET   /api/users/{user_id}/actions         access scope
    POST  /api/users/{user_id}/actions         access scope → client-or-admin
    PATCH /api/actions/{action_id}/completion  feedback access on the action owner
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import (
    authorize_client_record_creation,
    authorize_user_scope,
    get_principal,
)
from resilience_hub.database import get_db_session, utcnow
from resilience_hub.models import Action
from resilience_hub.repositories import BaseRepository
from resilience_hub.routes.common import load_or_404
from resilience_hub.schemas.goals import ActionCompletionUpdate, ActionCreate, ActionResponse
from resilience_hub.services.access_control import authorize_feedback

router = APIRouter(prefix="/api", tags=["Actions"])

OWN_ACTION_UPDATE = (
    "As a therapist, you can only provide feedback on actions, not update your own actions."
)


@router.get("/users/{user_id}/actions", response_model=List[ActionResponse])
async def list_actions(
    user_id: int,
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> List[ActionResponse]:
    actions = await BaseRepository(Action, db).list_by(
        user_id=user_id, order_by=Action.created_at.desc()
    )
    return [ActionResponse.model_validate(a) for a in actions]


@router.post(
    "/users/{user_id}/actions",
    response_model=ActionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_action(
    user_id: int,
    payload: ActionCreate,
    _: Principal = Depends(authorize_client_record_creation),
    db: AsyncSession = Depends(get_db_session),
) -> ActionResponse:
    values = payload.model_dump()
    values["type"] = payload.type.value
    action = await BaseRepository(Action, db).create(Action(user_id=user_id, **values))
    return ActionResponse.model_validate(action)


@router.patch("/actions/{action_id}/completion", response_model=ActionResponse)
async def update_action_completion(
    action_id: int,
    payload: ActionCompletionUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ActionResponse:
    action = await load_or_404(db, Action, action_id, "Action")
    await authorize_feedback(db, principal, action.user_id, OWN_ACTION_UPDATE)

    values = {
        "is_completed": payload.is_completed,
        "completed_at": utcnow() if payload.is_completed else None,
    }
    if payload.mood_after is not None:
        values["mood_after"] = payload.mood_after
    if payload.reflection is not None:
        values["reflection"] = payload.reflection
    action = await BaseRepository(Action, db).update(action, values)
    return ActionResponse.model_validate(action)
