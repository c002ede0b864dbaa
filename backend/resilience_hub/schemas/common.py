"""
ResilienceHub Backend — Shared Schema Building Blocks
=====================================================

What:  Base model and small response envelopes shared by every schema module.

Wire convention:
    JSON uses camelCase (`userId`, `therapistId`, `expiresAt`). Request bodies
    accept camelCase or snake_case; responses are always camelCase.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    """Body of every error response and of simple acknowledgements."""

    message: str = Field(description="Human-readable outcome or failure reason")


class ValidationErrorResponse(MessageResponse):
    errors: List[dict] = Field(default_factory=list)


class HealthResponse(CamelModel):
    status: str = Field(description="healthy | unhealthy")
    version: str
    database: str = Field(description="connected | disconnected")
    session_cache: str = Field(description="running | stopped | disabled")
    uptime_seconds: float
    detail: Optional[str] = None
