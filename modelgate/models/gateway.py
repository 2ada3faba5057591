"""
Gateway result models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable result data
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from modelgate.models.provider import utc_now


class ProviderSelection(BaseModel):
    """A session's current routing choice."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., description="Session the choice belongs to")
    provider_id: str = Field(..., description="Selected provider")
    model_id: Optional[str] = Field(None, description="Selected model")
    timestamp: datetime = Field(default_factory=utc_now)


class TaskType(str, Enum):
    """Kind of work a request does; each needs one model capability."""

    CHAT = "chat"
    TEXT = "text"
    CODE = "code"
    IMAGE = "image"

    @property
    def required_capability(self) -> str:
        return "multimodal" if self is TaskType.IMAGE else "text-generation"


class TaskAssignment(BaseModel):
    """Provider and model that serve a task type."""

    model_config = ConfigDict(frozen=True)

    task_type: TaskType
    provider_id: str
    model_id: str
    assigned_at: datetime = Field(default_factory=utc_now)


class ProviderStatus(BaseModel):
    """Result of a connectivity probe."""

    provider_id: str
    is_active: bool
    can_connect: bool = Field(..., description="Advisory probe result")
    last_checked: datetime


class HealthCheckResult(BaseModel):
    """Health of one provider; failures are data, never exceptions."""

    provider_id: str
    is_healthy: bool
    details: Dict[str, Any] = Field(default_factory=dict)
    checked_at: datetime = Field(default_factory=utc_now)
