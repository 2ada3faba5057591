"""
Rate limiting models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable rate limit data
- Clear naming conventions
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RateLimitInfo(BaseModel):
    """Read-only view of a provider's rate window."""

    model_config = ConfigDict(frozen=True)

    provider_id: str = Field(..., description="Provider id")
    limit: int = Field(..., ge=0, description="Requests allowed per window")
    remaining: int = Field(..., ge=0, description="Requests remaining in window")
    current_count: int = Field(..., ge=0, description="Requests counted in window")
    window_ms: int = Field(..., ge=0, description="Window length in ms")
    reset_in_ms: int = Field(..., ge=0, description="Milliseconds until a slot frees")
    reset_time: datetime = Field(..., description="When a slot frees (UTC)")
    requests_per_day: Optional[int] = Field(None, description="Rolling 24h cap")
    daily_count: int = Field(default=0, ge=0, description="Requests in the last 24h")

    @model_validator(mode="after")
    def validate_remaining(self) -> "RateLimitInfo":
        """Validate remaining doesn't exceed limit."""
        if self.remaining > self.limit:
            raise ValueError(
                f"remaining ({self.remaining}) cannot exceed limit ({self.limit})"
            )
        return self

    @property
    def is_exceeded(self) -> bool:
        """Check if rate limit is exceeded."""
        if self.remaining == 0:
            return True
        return self.requests_per_day is not None and self.daily_count >= self.requests_per_day

    @property
    def usage_percentage(self) -> float:
        """Get usage as percentage (0.0-100.0)."""
        if self.limit == 0:
            return 100.0
        return (self.current_count / self.limit) * 100.0

    @property
    def retry_after_seconds(self) -> int:
        """Seconds to wait, rounded up."""
        return (self.reset_in_ms + 999) // 1000
