"""
Error response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Consistent error handling
- Clear naming conventions
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from modelgate.exceptions import (
    AppError,
    ErrorKind,
    RateLimitExceededError,
    ValidationError,
)
from modelgate.models.provider import utc_now

_GUIDANCE: Dict[ErrorKind, Tuple[str, str, List[str]]] = {
    ErrorKind.VALIDATION: (
        "Invalid Request",
        "The request was malformed or contained invalid parameters.",
        [
            "Try rephrasing your message",
            "Make sure your input is in the expected format",
        ],
    ),
    ErrorKind.NOT_FOUND: (
        "Not Found",
        "The requested provider, model or conversation does not exist.",
        [
            "Choose a provider from the available list",
            "Start a new conversation",
        ],
    ),
    ErrorKind.INACTIVE: (
        "Provider Unavailable",
        "The selected AI provider is currently unavailable.",
        [
            "Try switching to a different provider",
            "Try again in a few minutes",
        ],
    ),
    ErrorKind.MODEL_UNAVAILABLE: (
        "Model Unavailable",
        "The selected model is not offered by the provider.",
        [
            "Choose a different model from the provider",
            "Use a similar model from another provider",
        ],
    ),
    ErrorKind.RATE_LIMITED: (
        "Rate Limit Exceeded",
        "You've exceeded the rate limit for the selected provider.",
        [
            "Wait for the rate limit to reset",
            "Switch to a different provider",
            "Reduce the frequency of your requests",
        ],
    ),
    ErrorKind.PROVIDER: (
        "Provider Error",
        "The AI provider could not complete the request.",
        [
            "Try again in a few minutes",
            "Switch to a different provider",
            "Check the provider's API key configuration",
        ],
    ),
}

_DEFAULT_GUIDANCE = (
    "An Error Occurred",
    "An unexpected error occurred while processing your request.",
    ["Try again after a few minutes", "Switch to a different provider"],
)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str = Field(..., description="Error message describing what went wrong")
    error_code: ErrorKind = Field(..., description="Tagged error kind")
    title: str = Field(default="", description="Short user-facing title")
    message: str = Field(default="", description="User-facing explanation")
    suggestions: List[str] = Field(default_factory=list, description="What to try next")
    errors: List[str] = Field(default_factory=list, description="Validation violations")
    retry_after: Optional[int] = Field(None, description="Seconds until retry")
    timestamp: datetime = Field(
        default_factory=utc_now, description="Error timestamp (ISO 8601)"
    )

    @classmethod
    def from_error(cls, error: AppError) -> "ErrorResponse":
        """Build a response with user guidance for a domain error."""
        title, message, suggestions = _GUIDANCE.get(error.kind, _DEFAULT_GUIDANCE)
        response = cls(
            detail=str(error),
            error_code=error.kind,
            title=title,
            message=message,
            suggestions=list(suggestions),
        )
        if isinstance(error, ValidationError):
            response.errors = list(error.errors)
        if isinstance(error, RateLimitExceededError):
            response.retry_after = error.retry_after_seconds
            minutes = max(1, -(-response.retry_after // 60))
            response.suggestions.insert(
                0, f"Please wait {minutes} minute(s) before making more requests"
            )
        return response

    @classmethod
    def validation_error(cls, detail: str, errors: List[str]) -> "ErrorResponse":
        """Create validation error."""
        return cls.from_error(ValidationError(detail, errors))

    @classmethod
    def internal_error(cls, detail: Optional[str] = None) -> "ErrorResponse":
        """Create internal server error."""
        title, message, suggestions = _DEFAULT_GUIDANCE
        return cls(
            detail=detail or "Internal server error",
            error_code=ErrorKind.INTERNAL,
            title=title,
            message=message,
            suggestions=list(suggestions),
        )
