"""
Health check endpoints.

Sandi Metz Principles:
- Single Responsibility: Health check logic only
- Small functions: Each check isolated
- Clear naming: Descriptive endpoint names
"""

from fastapi import APIRouter, Depends

from modelgate import __version__
from modelgate.api.deps import get_gateway
from modelgate.config import config
from modelgate.models.response import HealthResponse, ReadinessResponse
from modelgate.services.gateway import ProviderGateway

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Health status response
    """
    return HealthResponse(
        status="healthy",
        environment=config.app_env,
        version=__version__,
    )


@router.get("/live", response_model=HealthResponse)
async def liveness_check() -> HealthResponse:
    """
    Liveness probe endpoint.

    Always returns healthy if the application is running.
    """
    return await health_check()


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> ReadinessResponse:
    """
    Readiness probe endpoint.

    Checks every provider concurrently; a failing provider degrades the
    status but never fails the request.
    """
    results = await gateway.health_check_all()
    return ReadinessResponse.from_results(results, config.app_env, __version__)
