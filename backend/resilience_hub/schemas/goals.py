from datetime import datetime
from typing import Optional

from pydantic import Field

from resilience_hub.models import ActionType, GoalStatus
from resilience_hub.schemas.common import CamelModel


class GoalCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    specific: str = Field(min_length=1)
    measurable: str = Field(min_length=1)
    achievable: str = Field(min_length=1)
    relevant: str = Field(min_length=1)
    timebound: str = Field(min_length=1)
    deadline: Optional[datetime] = None


class GoalResponse(CamelModel):
    id: int
    user_id: int
    title: str
    specific: str
    measurable: str
    achievable: str
    relevant: str
    timebound: str
    deadline: Optional[datetime] = None
    status: GoalStatus
    therapist_comments: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class GoalStatusUpdate(CamelModel):
    status: GoalStatus
    therapist_comments: Optional[str] = None


class MilestoneCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None


class MilestoneResponse(CamelModel):
    id: int
    goal_id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    is_completed: bool
    created_at: datetime


class MilestoneCompletionUpdate(CamelModel):
    is_completed: bool


class ActionCreate(CamelModel):
    type: ActionType
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty_rating: Optional[int] = Field(default=None, ge=1, le=10)
    mood_before: Optional[int] = Field(default=None, ge=1, le=10)


class ActionResponse(CamelModel):
    id: int
    user_id: int
    type: ActionType
    title: str
    description: Optional[str] = None
    difficulty_rating: Optional[int] = None
    is_completed: bool
    completed_at: Optional[datetime] = None
    mood_before: Optional[int] = None
    mood_after: Optional[int] = None
    reflection: Optional[str] = None
    created_at: datetime


class ActionCompletionUpdate(CamelModel):
    is_completed: bool
    mood_after: Optional[int] = Field(default=None, ge=1, le=10)
    reflection: Optional[str] = None
