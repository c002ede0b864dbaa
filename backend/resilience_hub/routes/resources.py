"""
ResilienceHub Backend — Resource Library Routes
===============================================

Route Inventory:
    GET    /api/resources                                  session
    POST   /api/resources                                  therapist (or admin)
    DELETE /api/resources/{resource_id}                    creator or admin
    POST   /api/resources/{resource_id}/assign             therapist (or admin) + creation permission on client
    GET    /api/users/{user_id}/resource-assignments       access scope
    PATCH  /api/resource-assignments/{assignment_id}/status   assignee only
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import authorize_user_scope, get_principal, require_therapist
from resilience_hub.database import get_db_session, utcnow
from resilience_hub.exceptions import AuthorizationError, NotFoundError
from resilience_hub.models import (
    AssignmentStatus,
    Resource,
    ResourceAssignment,
    ResourceFeedback,
    User,
)
from resilience_hub.repositories import BaseRepository
from resilience_hub.routes.common import load_or_404
from resilience_hub.schemas.common import MessageResponse
from resilience_hub.schemas.resources import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentStatusUpdate,
    ResourceCreate,
    ResourceResponse,
)
from resilience_hub.services.access_control import check_resource_creation_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Resources"])


@router.get("/resources", response_model=List[ResourceResponse])
async def list_resources(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[ResourceResponse]:
    query = select(Resource).order_by(Resource.created_at.desc())
    if principal.is_client:
        query = query.where(Resource.is_published.is_(True))
    else:
        query = query.where(
            or_(Resource.is_published.is_(True), Resource.created_by == principal.id)
        )
    result = await db.execute(query)
    return [ResourceResponse.model_validate(r) for r in result.scalars().all()]


@router.post("/resources", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
async def create_resource(
    payload: ResourceCreate,
    principal: Principal = Depends(require_therapist),
    db: AsyncSession = Depends(get_db_session),
) -> ResourceResponse:
    values = payload.model_dump()
    values["type"] = payload.type.value
    resource = await BaseRepository(Resource, db).create(
        Resource(created_by=principal.id, **values)
    )
    return ResourceResponse.model_validate(resource)


@router.delete("/resources/{resource_id}", response_model=MessageResponse)
async def delete_resource(
    resource_id: int,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    resource = await load_or_404(db, Resource, resource_id, "Resource")
    if not (principal.is_admin or resource.created_by == principal.id):
        raise AuthorizationError("Access denied. You can only delete your own resources.")
    await db.execute(delete(ResourceAssignment).where(ResourceAssignment.resource_id == resource_id))
    await db.execute(delete(ResourceFeedback).where(ResourceFeedback.resource_id == resource_id))
    await BaseRepository(Resource, db).delete(resource_id)
    return MessageResponse(message="Resource deleted successfully")


@router.post(
    "/resources/{resource_id}/assign",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_resource(
    resource_id: int,
    payload: AssignmentCreate,
    principal: Principal = Depends(require_therapist),
    db: AsyncSession = Depends(get_db_session),
) -> AssignmentResponse:
    await load_or_404(db, Resource, resource_id, "Resource")
    if principal.is_therapist and payload.client_id == principal.id:
        raise AuthorizationError("Access denied. You can only assign resources to your clients.")
    await check_resource_creation_permission(db, principal, payload.client_id)
    if await db.get(User, payload.client_id) is None:
        raise NotFoundError(resource="User", resource_id=payload.client_id)

    assignment = await BaseRepository(ResourceAssignment, db).create(
        ResourceAssignment(
            resource_id=resource_id,
            assigned_by=principal.id,
            assigned_to=payload.client_id,
            is_priority=payload.is_priority,
            notes=payload.notes,
        )
    )
    logger.info("Resource %s assigned to %s by %s", resource_id, payload.client_id, principal.id)
    return AssignmentResponse.model_validate(assignment)


@router.get("/users/{user_id}/resource-assignments", response_model=List[AssignmentResponse])
async def list_assignments(
    user_id: int,
    _: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> List[AssignmentResponse]:
    rows = await BaseRepository(ResourceAssignment, db).list_by(
        assigned_to=user_id, order_by=ResourceAssignment.assigned_at.desc()
    )
    return [AssignmentResponse.model_validate(r) for r in rows]


@router.patch("/resource-assignments/{assignment_id}/status", response_model=AssignmentResponse)
async def update_assignment_status(
    assignment_id: int,
    payload: AssignmentStatusUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> AssignmentResponse:
    assignment = await load_or_404(db, ResourceAssignment, assignment_id, "Resource assignment")
    if assignment.assigned_to != principal.id:
        raise AuthorizationError("Access denied. You can only update your own assignments.")
    values = {"status": payload.status}
    if payload.status == AssignmentStatus.COMPLETED.value:
        values["completed_at"] = utcnow()
    assignment = await BaseRepository(ResourceAssignment, db).update(assignment, values)
    return AssignmentResponse.model_validate(assignment)
