"""
API response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable response data
- Clear naming conventions
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from modelgate.models.gateway import HealthCheckResult


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Service status")
    environment: str = Field(..., description="Environment name")
    version: str = Field(..., description="Application version")


class ReadinessResponse(BaseModel):
    """Readiness response with per-provider health."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Overall status"
    )
    environment: str = Field(..., description="Environment name")
    version: str = Field(..., description="Application version")
    providers: List[HealthCheckResult] = Field(
        default_factory=list, description="Provider health"
    )

    @classmethod
    def from_results(
        cls, results: List[HealthCheckResult], environment: str, version: str
    ) -> "ReadinessResponse":
        """Overall status: all healthy, none healthy, or degraded."""
        healthy = [r for r in results if r.is_healthy]
        if results and len(healthy) == len(results):
            status = "healthy"
        elif not healthy:
            status = "unhealthy"
        else:
            status = "degraded"
        return cls(
            status=status, environment=environment, version=version, providers=results
        )


class DeleteResponse(BaseModel):
    """Result of a removal."""

    deleted: bool
    id: Optional[str] = None
