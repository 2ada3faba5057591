"""
Chat request and response models.

Sandi Metz Principles:
- Small classes focused on data validation
- Clear property names
- Single responsibility per model
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from modelgate.models.gateway import TaskType


class ChatRequest(BaseModel):
    """Incoming chat message with routing options."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="User message text",
        examples=["What is the capital of France?"],
    )

    provider_id: Optional[str] = Field(
        None, description="Provider to use (session selection, then config default)"
    )

    model_id: Optional[str] = Field(
        None,
        description="Model to use (provider's first model if omitted)",
        examples=["llama3-70b-8192", "gpt-4"],
    )

    conversation_id: Optional[str] = Field(
        None, description="Conversation to continue (current one if omitted)"
    )

    task_type: Optional[TaskType] = Field(
        None, description="Task type whose assignment routes the request"
    )

    session_id: str = Field(default="default", description="Routing session")

    max_tokens: Optional[int] = Field(
        None, ge=1, le=4000, description="Maximum tokens in response"
    )

    temperature: Optional[float] = Field(
        None,
        ge=0.0,
        le=2.0,
        description="Response randomness (0=deterministic, 2=creative)",
    )

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Validate and normalize message."""
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty")
        return v


class UsageMetrics(BaseModel):
    """Token usage metrics."""

    prompt_tokens: int = Field(..., ge=0, description="Tokens in prompt")
    completion_tokens: int = Field(..., ge=0, description="Tokens in completion")
    total_tokens: int = Field(..., ge=0, description="Total tokens used")

    @classmethod
    def create(cls, prompt_tokens: int, completion_tokens: int) -> "UsageMetrics":
        """Create usage metrics with calculated total."""
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )


class ChatResponse(BaseModel):
    """Reply to a chat message."""

    conversation_id: str = Field(..., description="Conversation the reply belongs to")
    response: str = Field(..., description="Assistant reply text")
    provider_id: str = Field(..., description="Provider used")
    model_id: str = Field(..., description="Model used")
    usage: UsageMetrics = Field(..., description="Token usage metrics")
    from_cache: bool = Field(..., description="Whether the reply was memoized")
    latency_ms: float = Field(..., ge=0, description="Request latency in milliseconds")
