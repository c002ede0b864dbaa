"""
ResilienceHub Backend — Subscription Plan Routes
================================================

Reads are public; every mutation runs Authenticator → RequireAdmin.

Route Inventory:
    GET    /api/subscription-plans                 public (?activeOnly=false needs admin)
    GET    /api/subscription-plans/{plan_id}       public
    POST   /api/subscription-plans                 admin
    PATCH  /api/subscription-plans/{plan_id}       admin
    POST   /api/subscription-plans/{plan_id}/default   admin (clears the previous default)
    DELETE /api/subscription-plans/{plan_id}       admin (deactivates)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import authenticate_request, get_session_cache, require_admin
from resilience_hub.auth.gates import ensure_admin
from resilience_hub.database import get_db_session
from resilience_hub.exceptions import ValidationError
from resilience_hub.models import SubscriptionPlan
from resilience_hub.repositories import BaseRepository
from resilience_hub.routes.common import load_or_404
from resilience_hub.schemas.common import MessageResponse
from resilience_hub.schemas.subscriptions import PlanCreate, PlanResponse, PlanUpdate
from resilience_hub.services.session_cache import SessionCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscription-plans", tags=["Subscription Plans"])


async def _clear_default(db: AsyncSession) -> None:
    await db.execute(
        update(SubscriptionPlan)
        .where(SubscriptionPlan.is_default.is_(True))
        .values(is_default=False)
    )


@router.get("", response_model=List[PlanResponse])
async def list_plans(
    request: Request,
    active_only: bool = Query(default=True, alias="activeOnly"),
    cache: Optional[SessionCache] = Depends(get_session_cache),
    db: AsyncSession = Depends(get_db_session),
) -> List[PlanResponse]:
    filters = {}
    if active_only:
        filters["is_active"] = True
    else:
        context = await authenticate_request(request, db, cache)
        ensure_admin(context.principal)
    plans = await BaseRepository(SubscriptionPlan, db).list_by(
        order_by=SubscriptionPlan.price, **filters
    )
    return [PlanResponse.model_validate(p) for p in plans]


@router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan(plan_id: int, db: AsyncSession = Depends(get_db_session)) -> PlanResponse:
    return PlanResponse.model_validate(
        await load_or_404(db, SubscriptionPlan, plan_id, "Subscription plan")
    )


@router.post("", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    payload: PlanCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PlanResponse:
    if payload.is_default:
        await _clear_default(db)
    plan = await BaseRepository(SubscriptionPlan, db).create(SubscriptionPlan(**payload.model_dump()))
    logger.info("Subscription plan %s created by admin %s", plan.id, principal.id)
    return PlanResponse.model_validate(plan)


@router.patch("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: int,
    payload: PlanUpdate,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PlanResponse:
    plan = await load_or_404(db, SubscriptionPlan, plan_id, "Subscription plan")
    plan = await BaseRepository(SubscriptionPlan, db).update(
        plan, payload.model_dump(exclude_unset=True)
    )
    return PlanResponse.model_validate(plan)


@router.post("/{plan_id}/default", response_model=PlanResponse)
async def set_default_plan(
    plan_id: int,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PlanResponse:
    plan = await load_or_404(db, SubscriptionPlan, plan_id, "Subscription plan")
    if not plan.is_active:
        raise ValidationError("An inactive plan cannot be the default", field="planId")
    await _clear_default(db)
    plan = await BaseRepository(SubscriptionPlan, db).update(plan, {"is_default": True})
    return PlanResponse.model_validate(plan)


@router.delete("/{plan_id}", response_model=MessageResponse)
async def deactivate_plan(
    plan_id: int,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    plan = await load_or_404(db, SubscriptionPlan, plan_id, "Subscription plan")
    await BaseRepository(SubscriptionPlan, db).update(plan, {"is_active": False, "is_default": False})
    return MessageResponse(message="Subscription plan deactivated")
