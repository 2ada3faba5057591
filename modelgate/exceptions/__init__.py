"""
Custom exceptions for the application.

Every error carries a ``kind`` tag so callers can branch on the failure
category without matching message text.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from modelgate.models.ratelimit import RateLimitInfo


class ErrorKind(str, Enum):
    """Tagged error categories."""

    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "PROVIDER_INACTIVE"
    MODEL_UNAVAILABLE = "MODEL_UNAVAILABLE"
    RATE_LIMITED = "RATE_LIMIT_EXCEEDED"
    PROVIDER = "PROVIDER_ERROR"
    CONFIGURATION = "CONFIGURATION_ERROR"
    CACHE = "CACHE_ERROR"
    INTERNAL = "INTERNAL_ERROR"


class AppError(Exception):
    """Base exception for application errors."""

    kind: ErrorKind = ErrorKind.INTERNAL


class ValidationError(AppError):
    """Raised when validation fails.

    All violations found in one pass are kept in ``errors``, in order.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, errors: Optional[Sequence[str]] = None):
        self.errors: List[str] = list(errors) if errors else [message]
        super().__init__(message)

    @classmethod
    def from_errors(cls, subject: str, errors: Sequence[str]) -> "ValidationError":
        """Build a single error summarising every violation."""
        return cls(f"Invalid {subject}: " + "; ".join(errors), errors)


class NotFoundError(AppError):
    """Raised when a provider, model or conversation id is unknown."""

    kind = ErrorKind.NOT_FOUND


class ProviderInactiveError(AppError):
    """Raised when a known provider has been deactivated."""

    kind = ErrorKind.INACTIVE


class ModelUnavailableError(AppError):
    """Raised when a provider does not serve the requested model."""

    kind = ErrorKind.MODEL_UNAVAILABLE


class RateLimitExceededError(AppError):
    """Raised when a provider's request budget is spent."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str,
        info: Optional["RateLimitInfo"] = None,
        retry_after_ms: int = 0,
    ):
        self.info = info
        self.retry_after_ms = retry_after_ms
        super().__init__(message)

    @property
    def retry_after_seconds(self) -> int:
        """Retry delay rounded up to whole seconds."""
        return (self.retry_after_ms + 999) // 1000


class ProviderError(AppError):
    """Raised when the outbound provider call fails."""

    kind = ErrorKind.PROVIDER


class ConfigurationError(AppError):
    """Raised when configuration is invalid."""

    kind = ErrorKind.CONFIGURATION


class CacheError(AppError):
    """Raised when cache operations fail."""

    kind = ErrorKind.CACHE


class PreloadError(CacheError):
    """Raised when one or more preload tasks fail."""

    def __init__(self, failures: Sequence[Tuple[str, BaseException]]):
        self.failures: List[Tuple[str, BaseException]] = list(failures)
        keys = ", ".join(key for key, _ in self.failures)
        super().__init__(f"{len(self.failures)} preload task(s) failed: {keys}")

    @property
    def exceptions(self) -> List[BaseException]:
        """Underlying loader exceptions."""
        return [error for _, error in self.failures]


def error_details(error: BaseException) -> dict[str, Any]:
    """Describe an exception for logs and health payloads."""
    details: dict[str, Any] = {
        "error": str(error) or type(error).__name__,
        "error_type": type(error).__name__,
    }
    if isinstance(error, AppError):
        details["kind"] = error.kind.value
    return details
