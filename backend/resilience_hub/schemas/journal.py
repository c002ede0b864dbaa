from datetime import datetime
from typing import Optional

from pydantic import Field

from resilience_hub.schemas.common import CamelModel


class JournalEntryCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    mood: Optional[int] = Field(default=None, ge=1, le=10)
    is_private: bool = False


class JournalEntryResponse(CamelModel):
    id: int
    user_id: int
    title: str
    content: str
    mood: Optional[int] = None
    is_private: bool
    created_at: datetime
    updated_at: datetime


class JournalCommentCreate(CamelModel):
    comment: str = Field(min_length=1)


class JournalCommentResponse(CamelModel):
    id: int
    journal_entry_id: int
    user_id: int
    therapist_id: Optional[int] = None
    comment: str
    created_at: datetime
