"""
ResilienceHub Backend — Journal Routes
======================================

Route Inventory:
    GET    /api/users/{user_id}/journal               access scope; private entries author/admin only
    POST   /api/users/{user_id}/journal               access scope → client-or-admin
    DELETE /api/users/{user_id}/journal/{entry_id}    author or admin (cascades comments)
    GET    /api/journal/{entry_id}/comments           author, author's therapist, admin
    POST   /api/journal/{entry_id}/comments           author, author's therapist, admin
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resilience_hub.auth.context import Principal
from resilience_hub.auth.dependencies import (
    authorize_client_record_creation,
    authorize_user_scope,
    get_principal,
)
from resilience_hub.database import get_db_session
from resilience_hub.exceptions import AuthorizationError
from resilience_hub.models import JournalComment, JournalEntry
from resilience_hub.repositories import BaseRepository
from resilience_hub.routes.common import load_or_404, load_owned
from resilience_hub.schemas.common import MessageResponse
from resilience_hub.schemas.journal import (
    JournalCommentCreate,
    JournalCommentResponse,
    JournalEntryCreate,
    JournalEntryResponse,
)
from resilience_hub.services.access_control import check_user_access
from resilience_hub.services.record_service import record_service

router = APIRouter(prefix="/api", tags=["Journal"])

PRIVATE_ENTRY = "Access denied. This journal entry is private."


def _sees_private(principal: Principal, author_id: int) -> bool:
    return principal.is_admin or principal.id == author_id


async def _authorize_entry(db: AsyncSession, principal: Principal, entry: JournalEntry) -> None:
    if entry.is_private and not _sees_private(principal, entry.user_id):
        raise AuthorizationError(PRIVATE_ENTRY)
    await check_user_access(db, principal, entry.user_id)


@router.get("/users/{user_id}/journal", response_model=List[JournalEntryResponse])
async def list_entries(
    user_id: int,
    principal: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> List[JournalEntryResponse]:
    query = (
        select(JournalEntry)
        .where(JournalEntry.user_id == user_id)
        .order_by(JournalEntry.created_at.desc())
    )
    if not _sees_private(principal, user_id):
        query = query.where(JournalEntry.is_private.is_(False))
    result = await db.execute(query)
    return [JournalEntryResponse.model_validate(e) for e in result.scalars().all()]


@router.post(
    "/users/{user_id}/journal",
    response_model=JournalEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_entry(
    user_id: int,
    payload: JournalEntryCreate,
    _: Principal = Depends(authorize_client_record_creation),
    db: AsyncSession = Depends(get_db_session),
) -> JournalEntryResponse:
    entry = await BaseRepository(JournalEntry, db).create(
        JournalEntry(user_id=user_id, **payload.model_dump())
    )
    return JournalEntryResponse.model_validate(entry)


@router.delete("/users/{user_id}/journal/{entry_id}", response_model=MessageResponse)
async def delete_entry(
    user_id: int,
    entry_id: int,
    principal: Principal = Depends(authorize_user_scope),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    entry = await load_owned(db, JournalEntry, entry_id, user_id, "Journal entry")
    if not _sees_private(principal, entry.user_id):
        raise AuthorizationError("Access denied. Only the author can delete a journal entry.")
    await record_service.delete_journal_entry(db, entry_id)
    return MessageResponse(message="Journal entry deleted successfully")


@router.get("/journal/{entry_id}/comments", response_model=List[JournalCommentResponse])
async def list_comments(
    entry_id: int,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[JournalCommentResponse]:
    entry = await load_or_404(db, JournalEntry, entry_id, "Journal entry")
    await _authorize_entry(db, principal, entry)
    comments = await BaseRepository(JournalComment, db).list_by(
        journal_entry_id=entry.id, order_by=JournalComment.created_at
    )
    return [JournalCommentResponse.model_validate(c) for c in comments]


@router.post(
    "/journal/{entry_id}/comments",
    response_model=JournalCommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    entry_id: int,
    payload: JournalCommentCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> JournalCommentResponse:
    entry = await load_or_404(db, JournalEntry, entry_id, "Journal entry")
    await _authorize_entry(db, principal, entry)
    comment = await BaseRepository(JournalComment, db).create(
        JournalComment(
            journal_entry_id=entry.id,
            user_id=principal.id,
            therapist_id=principal.id if principal.is_therapist else None,
            comment=payload.comment,
        )
    )
    return JournalCommentResponse.model_validate(comment)
