"""
Provider management endpoints.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Small functions: Minimal logic in endpoints
- Dependency Injection: Gateway and registry injected
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from modelgate.api.deps import get_gateway, get_registry
from modelgate.llm.registry import ProviderRegistry
from modelgate.models.gateway import (
    HealthCheckResult,
    ProviderSelection,
    ProviderStatus,
    TaskAssignment,
    TaskType,
)
from modelgate.models.provider import ModelDescriptor, Provider
from modelgate.models.ratelimit import RateLimitInfo
from modelgate.models.response import DeleteResponse
from modelgate.services.gateway import ProviderGateway

router = APIRouter(prefix="/providers")


class SelectProviderRequest(BaseModel):
    """Routing choice for a session."""

    provider_id: str = Field(..., min_length=1, description="Provider to use")
    model_id: Optional[str] = Field(None, description="Model to use")
    session_id: str = Field(default="default", description="Routing session")


@router.get("", response_model=List[Provider])
async def list_providers(
    registry: ProviderRegistry = Depends(get_registry),  # noqa: B008
) -> List[Provider]:
    """List every provider, active or not."""
    return registry.list_all()


@router.get("/available", response_model=List[Provider])
async def list_available_providers(
    registry: ProviderRegistry = Depends(get_registry),  # noqa: B008
) -> List[Provider]:
    """List active providers."""
    return registry.list_active()


@router.get("/rate-limits", response_model=Dict[str, RateLimitInfo])
async def get_rate_limits(
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> Dict[str, RateLimitInfo]:
    """Current rate window of every provider."""
    return gateway.rate_limits()


@router.post("/select", response_model=ProviderSelection)
async def select_provider(
    request: SelectProviderRequest,
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> ProviderSelection:
    """
    Select provider and model for a session.

    Raises:
        NotFoundError, ProviderInactiveError, ModelUnavailableError
    """
    return gateway.select_provider(
        request.provider_id, request.model_id, session_id=request.session_id
    )


@router.get("/selection", response_model=Optional[ProviderSelection])
async def get_selection(
    session_id: str = "default",
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> Optional[ProviderSelection]:
    """Current selection of a session, null if none."""
    return gateway.get_selection(session_id)


class AssignTaskRequest(BaseModel):
    """Provider and model for a task type."""

    provider_id: str = Field(..., min_length=1, description="Provider to use")
    model_id: str = Field(..., min_length=1, description="Model to use")


@router.get("/tasks", response_model=List[TaskAssignment])
async def list_task_assignments(
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> List[TaskAssignment]:
    """Assigned task types, in task type order."""
    return gateway.list_task_assignments()


@router.put("/tasks/{task_type}", response_model=TaskAssignment)
async def assign_task(
    task_type: TaskType,
    request: AssignTaskRequest,
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> TaskAssignment:
    """
    Route a task type to a provider and model.

    Raises:
        NotFoundError, ProviderInactiveError, ModelUnavailableError, ValidationError
    """
    return gateway.assign_task(task_type, request.provider_id, request.model_id)


@router.delete("/tasks/{task_type}", response_model=DeleteResponse)
async def clear_task_assignment(
    task_type: TaskType,
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> DeleteResponse:
    return DeleteResponse(
        deleted=gateway.clear_task_assignment(task_type), id=task_type.value
    )


@router.get("/{provider_id}", response_model=Provider)
async def get_provider(
    provider_id: str,
    registry: ProviderRegistry = Depends(get_registry),  # noqa: B008
) -> Provider:
    return registry.get(provider_id)


@router.get("/{provider_id}/status", response_model=ProviderStatus)
async def get_provider_status(
    provider_id: str,
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> ProviderStatus:
    """Probe provider connectivity."""
    return await gateway.status(provider_id)


@router.get("/{provider_id}/health", response_model=HealthCheckResult)
async def get_provider_health(
    provider_id: str,
    gateway: ProviderGateway = Depends(get_gateway),  # noqa: B008
) -> HealthCheckResult:
    """Provider health; failures are reported in the body."""
    return await gateway.health_check(provider_id)


@router.post("/{provider_id}/activate", response_model=Provider)
async def activate_provider(
    provider_id: str,
    registry: ProviderRegistry = Depends(get_registry),  # noqa: B008
) -> Provider:
    return registry.activate(provider_id)


@router.post("/{provider_id}/deactivate", response_model=Provider)
async def deactivate_provider(
    provider_id: str,
    registry: ProviderRegistry = Depends(get_registry),  # noqa: B008
) -> Provider:
    return registry.deactivate(provider_id)


@router.post("/{provider_id}/models", response_model=Provider)
async def add_model(
    provider_id: str,
    model: ModelDescriptor,
    registry: ProviderRegistry = Depends(get_registry),  # noqa: B008
) -> Provider:
    """Add a model; adding an existing model id changes nothing."""
    registry.add_model(provider_id, model)
    return registry.get(provider_id)


@router.delete("/{provider_id}/models/{model_id:path}", response_model=DeleteResponse)
async def remove_model(
    provider_id: str,
    model_id: str,
    registry: ProviderRegistry = Depends(get_registry),  # noqa: B008
) -> DeleteResponse:
    return DeleteResponse(deleted=registry.remove_model(provider_id, model_id), id=model_id)
