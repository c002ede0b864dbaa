from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from resilience_hub.schemas.common import CamelModel


class PlanCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(ge=0)
    interval: Literal["month", "year"] = "month"
    features: List[str] = Field(default_factory=list)
    max_clients: int = Field(default=1, ge=1)
    is_active: bool = True
    is_default: bool = False


class PlanUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    interval: Optional[Literal["month", "year"]] = None
    features: Optional[List[str]] = None
    max_clients: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class PlanResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    interval: str
    features: List[str]
    max_clients: int
    is_active: bool
    is_default: bool
    created_at: datetime
