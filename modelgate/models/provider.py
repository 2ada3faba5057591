"""
Provider catalog models.

Sandi Metz Principles:
- Small classes with clear purpose
- Validation at the boundary, once
- Clear naming conventions
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Set
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError as PydanticValidationError,
    field_validator,
)


def utc_now() -> datetime:
    """Current aware UTC time."""
    return datetime.now(timezone.utc)


class ProviderTier(str, Enum):
    """Commercial tier of a provider account."""

    FREE = "free"
    PAID = "paid"
    ENTERPRISE = "enterprise"


class RateLimitPolicy(BaseModel):
    """Per-provider request budget."""

    model_config = ConfigDict(frozen=True)

    max_requests: int = Field(default=60, ge=0, description="Requests allowed per window")
    window_ms: int = Field(default=60_000, ge=0, description="Window length in ms")
    requests_per_day: Optional[int] = Field(
        default=None, ge=0, description="Rolling 24h request cap"
    )
    tokens_per_minute: Optional[int] = Field(
        default=None, ge=0, description="Advertised token budget (informational)"
    )
    cache_ttl_ms: Optional[int] = Field(
        default=None, ge=0, description="Response memoization TTL (window_ms if unset)"
    )

    @classmethod
    def per_minute(
        cls, limit: int, requests_per_day: Optional[int] = None
    ) -> "RateLimitPolicy":
        """Create per-minute rate limit."""
        return cls(max_requests=limit, window_ms=60_000, requests_per_day=requests_per_day)

    @property
    def response_ttl_ms(self) -> int:
        """TTL used when memoizing this provider's responses."""
        if self.cache_ttl_ms is not None:
            return self.cache_ttl_ms
        return self.window_ms


class ModelDescriptor(BaseModel):
    """A model served by a provider."""

    model_id: StrictStr = Field(..., description="Provider-side model identifier")
    name: str = Field(default="", description="Display name")
    capabilities: Set[str] = Field(default_factory=set, description="Capability tags")

    @field_validator("model_id")
    @classmethod
    def validate_model_id(cls, v: str) -> str:
        """Validate model id is not empty."""
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities


class Provider(BaseModel):
    """An external AI text-generation service."""

    model_config = ConfigDict(validate_assignment=True)

    id: StrictStr = Field(..., description="Globally unique provider id")
    name: StrictStr = Field(..., description="Display name")
    endpoint: StrictStr = Field(..., description="Base URL of the provider API")
    models: List[ModelDescriptor] = Field(default_factory=list, description="Model catalog")
    rate_limit: RateLimitPolicy = Field(
        default_factory=RateLimitPolicy, description="Request budget"
    )
    tier: ProviderTier = Field(default=ProviderTier.FREE, description="Account tier")
    is_active: StrictBool = Field(default=True, description="Administrative switch")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("id", "name")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        """Validate identifiers are not blank."""
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Validate endpoint parses as an absolute URL."""
        parsed = urlparse(v.strip())
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("must be a valid URL")
        return v.strip()

    def find_model(self, model_id: str) -> Optional[ModelDescriptor]:
        """Find a model by id."""
        for model in self.models:
            if model.model_id == model_id:
                return model
        return None

    @property
    def model_ids(self) -> List[str]:
        return [model.model_id for model in self.models]

    def to_public_dict(self) -> Dict[str, Any]:
        """Serializable view of the provider."""
        return self.model_dump(mode="json")


def format_validation_errors(error: PydanticValidationError) -> List[str]:
    """
    Flatten pydantic errors into ordered messages.

    Args:
        error: Pydantic validation error

    Returns:
        One "field: message" line per violation
    """
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "provider"
        messages.append(f"{location}: {item['msg']}")
    return messages


def validate_provider_data(data: Mapping[str, Any]) -> List[str]:
    """
    Validate raw provider data without building a provider.

    Args:
        data: Raw provider fields

    Returns:
        Every violation found, empty when valid
    """
    try:
        Provider.model_validate(dict(data))
    except PydanticValidationError as e:
        return format_validation_errors(e)
    return []
