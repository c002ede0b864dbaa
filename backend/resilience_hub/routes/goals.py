"""
ResilienceHub Backend — Goal & Milestone Routes
===============================================

Route Inventory:
    GET   /api/users/{user_id}/goals            access scope
    POST  /api/users/{user_id}/goals            access scope → client-or-admin
    PATCH /api/goals/{goal_id}/status           feedback access on the goal owner
    POST  /api/goals/{goal_id}/milestones       feedback access on the goal owner
    GET   /api/goals/{goal_id}/milestones       access scope on the goal owner
    PATCH /api/milestones/{milestone_id}/completion   feedback access on the goal owner

Feedback access = access scope, except that a therapist is denied on goals
they own themselves. Missing goals/milestones are 404 before any access check.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import (
    authorize_client_record_creation,
    authorize_user_scope,
    get_principal,
)
from resilience_hub.database import get_db_session
from resilience_hub.exceptions import AuthorizationError
from resilience_hub.models import Goal, GoalMilestone, GoalStatus
from resilience_hub.repositories import BaseRepository
from resilience_hub.routes.common import load_or_404
from resilience_hub.schemas.goals import (
    GoalCreate,
    GoalResponse,
    GoalStatusUpdate,
    MilestoneCompletionUpdate,
    MilestoneCreate,
    MilestoneResponse,
)
from resilience_hub.services.access_control import authorize_feedback, check_user_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Goals"])

OWN_GOAL_STATUS = (
    "As a therapist, you can only provide feedback on goals, "
    "not update the status of your own goals."
)
OWN_GOAL_MILESTONE_CREATE = (
    "As a therapist, you can only provide feedback on goals, "
    "not create milestones for your own goals."
)
OWN_GOAL_MILESTONE_UPDATE = (
    "As a therapist, you can only provide feedback on goals, "
    "not update milestones for your own goals."
)


@router.get("/users/{user_id}/goals", response_model=List[GoalResponse])
async def list_goals(
    user_id: int,
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> List[GoalResponse]:
    goals = await BaseRepository(Goal, db).list_by(user_id=user_id, order_by=Goal.created_at.desc())
    return [GoalResponse.model_validate(g) for g in goals]


@router.post(
    "/users/{user_id}/goals",
    response_model=GoalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_goal(
    user_id: int,
    payload: GoalCreate,
    _: Principal = Depends(authorize_client_record_creation),
    db: AsyncSession = Depends(get_db_session),
) -> GoalResponse:
    goal = await BaseRepository(Goal, db).create(Goal(user_id=user_id, **payload.model_dump()))
    return GoalResponse.model_validate(goal)


@router.patch("/goals/{goal_id}/status", response_model=GoalResponse)
async def update_goal_status(
    goal_id: int,
    payload: GoalStatusUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> GoalResponse:
    goal = await load_or_404(db, Goal, goal_id, "Goal")
    await authorize_feedback(db, principal, goal.user_id, OWN_GOAL_STATUS)

    # Past the feedback check a non-client is an admin or the owner's therapist
    reviewer_fields = payload.status is GoalStatus.APPROVED or payload.therapist_comments is not None
    if reviewer_fields and principal.is_client:
        raise AuthorizationError(
            "Access denied. Only the client's therapist can approve goals or add comments."
        )

    values = {"status": payload.status.value}
    if payload.therapist_comments is not None:
        values["therapist_comments"] = payload.therapist_comments
    goal = await BaseRepository(Goal, db).update(goal, values)
    logger.info("Goal %s status → %s by user %s", goal_id, payload.status.value, principal.id)
    return GoalResponse.model_validate(goal)


@router.post(
    "/goals/{goal_id}/milestones",
    response_model=MilestoneResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_milestone(
    goal_id: int,
    payload: MilestoneCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MilestoneResponse:
    goal = await load_or_404(db, Goal, goal_id, "Goal")
    await authorize_feedback(db, principal, goal.user_id, OWN_GOAL_MILESTONE_CREATE)
    milestone = await BaseRepository(GoalMilestone, db).create(
        GoalMilestone(goal_id=goal.id, **payload.model_dump())
    )
    return MilestoneResponse.model_validate(milestone)


@router.get("/goals/{goal_id}/milestones", response_model=List[MilestoneResponse])
async def list_milestones(
    goal_id: int,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[MilestoneResponse]:
    goal = await load_or_404(db, Goal, goal_id, "Goal")
    await check_user_access(db, principal, goal.user_id)
    milestones = await BaseRepository(GoalMilestone, db).list_by(
        goal_id=goal.id, order_by=GoalMilestone.created_at
    )
    return [MilestoneResponse.model_validate(m) for m in milestones]


@router.patch("/milestones/{milestone_id}/completion", response_model=MilestoneResponse)
async def update_milestone_completion(
    milestone_id: int,
    payload: MilestoneCompletionUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MilestoneResponse:
    milestone = await load_or_404(db, GoalMilestone, milestone_id, "Milestone")
    goal = await load_or_404(db, Goal, milestone.goal_id, "Goal")
    await authorize_feedback(db, principal, goal.user_id, OWN_GOAL_MILESTONE_UPDATE)
    milestone = await BaseRepository(GoalMilestone, db).update(
        milestone, {"is_completed": payload.is_completed}
    )
    return MilestoneResponse.model_validate(milestone)
