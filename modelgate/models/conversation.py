"""
Conversation models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable messages
- Clear naming conventions
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from modelgate.models.provider import utc_now


class MessageRole(str, Enum):
    """Who wrote a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    """A message in a conversation; replaced, never edited in place."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Message id")
    role: MessageRole = Field(..., description="Author role")
    content: str = Field(..., description="Message text")
    timestamp: datetime = Field(default_factory=utc_now)

    def as_prompt(self) -> Dict[str, str]:
        """Chat-completion message dict."""
        return {"role": self.role.value, "content": self.content}


class Conversation(BaseModel):
    """Ordered message log for a session."""

    id: str = Field(..., description="Conversation id")
    messages: List[Message] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    last_modified: datetime = Field(default_factory=utc_now)

    @property
    def message_count(self) -> int:
        return len(self.messages)


class ConversationStats(BaseModel):
    """Summary of a conversation."""

    id: str
    message_count: int = Field(..., ge=0)
    approx_token_count: int = Field(..., ge=0, description="ceil(len/4) per message")
    created_at: datetime
    last_modified: datetime
