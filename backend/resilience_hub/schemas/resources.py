from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from resilience_hub.models import AssignmentStatus, ResourceType
from resilience_hub.schemas.common import CamelModel


class ResourceCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    content: str = Field(min_length=1)
    category: Optional[str] = Field(default=None, max_length=100)
    tags: List[str] = Field(default_factory=list)
    type: ResourceType = ResourceType.ARTICLE
    file_url: Optional[str] = Field(default=None, max_length=500)
    is_published: bool = False


class ResourceResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    content: str
    category: Optional[str] = None
    tags: List[str]
    type: ResourceType
    file_url: Optional[str] = None
    created_by: int
    is_published: bool
    created_at: datetime


class AssignmentCreate(CamelModel):
    client_id: int
    is_priority: bool = False
    notes: Optional[str] = None


class AssignmentResponse(CamelModel):
    id: int
    resource_id: int
    assigned_by: int
    assigned_to: int
    is_priority: bool
    notes: Optional[str] = None
    status: AssignmentStatus
    assigned_at: datetime
    completed_at: Optional[datetime] = None


class AssignmentStatusUpdate(CamelModel):
    status: Literal["viewed", "completed"]
