"""
Provider gateway.

Routes requests to providers, enforcing per-provider request budgets and
memoizing results.

Sandi Metz Principles:
- Single Responsibility: Mediate between callers and providers
- Dependency Injection: Registry, limiter, cache and transport injected
- Fail fast: Catalog errors before cache, cache before budget
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

from modelgate.cache.cache_manager import CacheManager
from modelgate.exceptions import (
    AppError,
    ProviderError,
    RateLimitExceededError,
    ValidationError,
    error_details,
)
from modelgate.llm.rate_limiter import RateLimiter
from modelgate.llm.registry import ProviderRegistry
from modelgate.llm.timeout_handler import TimeoutConfig, TimeoutHandler
from modelgate.llm.transport import BaseTransport
from modelgate.models.gateway import (
    HealthCheckResult,
    ProviderSelection,
    ProviderStatus,
    TaskAssignment,
    TaskType,
)
from modelgate.models.provider import Provider
from modelgate.models.ratelimit import RateLimitInfo
from modelgate.utils.clock import Clock, system_clock, to_datetime
from modelgate.utils.logger import get_logger, log_error

logger = get_logger(__name__)

Loader = Callable[[], Awaitable[Any]]


def _task_type(value: str) -> TaskType:
    try:
        return TaskType(value)
    except ValueError as e:
        choices = ", ".join(t.value for t in TaskType)
        raise ValidationError(
            f"Unknown task type '{value}'", [f"task_type: must be one of {choices}"]
        ) from e


class ProviderGateway:
    """
    Single entry point for provider traffic.

    Cache hits and joins of an in-flight load never consume rate budget.
    The gateway never retries.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        rate_limiter: RateLimiter,
        cache: CacheManager,
        transport: Optional[BaseTransport] = None,
        clock: Clock = system_clock,
        probe_timeout_seconds: float = 5.0,
        dispatch_timeout_seconds: float = 30.0,
    ):
        """
        Initialize gateway.

        Args:
            registry: Provider catalog
            rate_limiter: Per-provider request budget
            cache: Response cache
            transport: Outbound transport (probes are simulated if None)
            clock: Epoch-millisecond clock
            probe_timeout_seconds: Default status probe timeout
            dispatch_timeout_seconds: Default loader timeout
        """
        self._registry = registry
        self._rate_limiter = rate_limiter
        self._cache = cache
        self._transport = transport
        self._clock = clock
        self._probe_timeout = TimeoutHandler(TimeoutConfig(probe_timeout_seconds))
        self._dispatch_timeout = TimeoutHandler(TimeoutConfig(dispatch_timeout_seconds))
        self._selections: Dict[str, ProviderSelection] = {}
        self._assignments: Dict[TaskType, TaskAssignment] = {}
        self._rate_limiter.update_limits(registry.rate_limit_policies())

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def cache(self) -> CacheManager:
        return self._cache

    @property
    def transport(self) -> Optional[BaseTransport]:
        return self._transport

    def select_provider(
        self,
        provider_id: str,
        model_id: Optional[str] = None,
        session_id: str = "default",
    ) -> ProviderSelection:
        """
        Record a session's routing choice.

        Args:
            provider_id: Provider to use
            model_id: Model to use (provider default if None)
            session_id: Session the choice belongs to

        Returns:
            Stored selection, replacing any previous one

        Raises:
            NotFoundError: If provider unknown
            ProviderInactiveError: If provider deactivated
            ModelUnavailableError: If provider does not serve model_id
        """
        if model_id is None:
            self._registry.resolve(provider_id)
        else:
            self._registry.resolve_model(provider_id, model_id)

        selection = ProviderSelection(
            session_id=session_id,
            provider_id=provider_id,
            model_id=model_id,
            timestamp=to_datetime(self._clock()),
        )
        self._selections[session_id] = selection
        logger.info(
            "Provider selected", session=session_id, provider=provider_id, model=model_id
        )
        return selection

    def get_selection(self, session_id: str = "default") -> Optional[ProviderSelection]:
        return self._selections.get(session_id)

    def clear_selection(self, session_id: str = "default") -> bool:
        return self._selections.pop(session_id, None) is not None

    def assign_task(
        self, task_type: TaskType, provider_id: str, model_id: str
    ) -> TaskAssignment:
        """
        Route a task type to a provider and model.

        Args:
            task_type: Task type to route
            provider_id: Provider to use
            model_id: Model to use

        Returns:
            Stored assignment, replacing any previous one

        Raises:
            NotFoundError: If provider unknown
            ProviderInactiveError: If provider deactivated
            ModelUnavailableError: If provider does not serve model_id
            ValidationError: If task_type is unknown or the model lacks its capability
        """
        task_type = _task_type(task_type)
        model = self._registry.resolve_model(provider_id, model_id)
        capability = task_type.required_capability
        if not model.has_capability(capability):
            raise ValidationError(
                f"Model '{model_id}' cannot serve task type '{task_type.value}'",
                [f"model_id: missing capability '{capability}'"],
            )

        assignment = TaskAssignment(
            task_type=task_type,
            provider_id=provider_id,
            model_id=model_id,
            assigned_at=to_datetime(self._clock()),
        )
        self._assignments[task_type] = assignment
        logger.info(
            "Task assigned", task_type=task_type.value, provider=provider_id, model=model_id
        )
        return assignment

    def get_task_assignment(self, task_type: TaskType) -> Optional[TaskAssignment]:
        return self._assignments.get(_task_type(task_type))

    def list_task_assignments(self) -> List[TaskAssignment]:
        return [self._assignments[t] for t in TaskType if t in self._assignments]

    def clear_task_assignment(self, task_type: TaskType) -> bool:
        return self._assignments.pop(_task_type(task_type), None) is not None

    async def status(
        self, provider_id: str, timeout: Optional[float] = None
    ) -> ProviderStatus:
        """
        Probe a provider.

        Inactive providers are not probed. A probe timeout counts as
        unreachable.

        Args:
            provider_id: Provider id
            timeout: Probe timeout in seconds (gateway default if None)

        Returns:
            Provider status

        Raises:
            NotFoundError: If provider unknown
        """
        provider = self._registry.get(provider_id)
        can_connect = provider.is_active
        if provider.is_active and self._transport is not None:
            can_connect = await self._probe(provider, timeout)

        return ProviderStatus(
            provider_id=provider.id,
            is_active=provider.is_active,
            can_connect=can_connect,
            last_checked=to_datetime(self._clock()),
        )

    async def health_check(
        self, provider_id: str, timeout: Optional[float] = None
    ) -> HealthCheckResult:
        """
        Check provider health; never raises.

        Args:
            provider_id: Provider id
            timeout: Probe timeout in seconds

        Returns:
            Health result, unhealthy with error details on any failure
        """
        checked_at = to_datetime(self._clock())
        try:
            status = await self.status(provider_id, timeout)
            info = self.rate_limit_info(provider_id)
        except Exception as e:
            log_error(e, "health_check", provider=provider_id)
            return HealthCheckResult(
                provider_id=provider_id,
                is_healthy=False,
                details=error_details(e),
                checked_at=checked_at,
            )

        return HealthCheckResult(
            provider_id=provider_id,
            is_healthy=status.is_active and status.can_connect,
            details={
                "is_active": status.is_active,
                "can_connect": status.can_connect,
                "model_count": len(self._registry.get(provider_id).models),
                "rate_limit_remaining": info.remaining,
            },
            checked_at=checked_at,
        )

    async def health_check_all(
        self, timeout: Optional[float] = None
    ) -> List[HealthCheckResult]:
        """Check every registered provider concurrently."""
        return list(
            await asyncio.gather(
                *(self.health_check(pid, timeout) for pid in self._registry.list_ids())
            )
        )

    async def dispatch(
        self,
        provider_id: str,
        model_id: str,
        fingerprint: str,
        loader: Loader,
        ttl_ms: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Serve a request from cache or through the loader.

        Args:
            provider_id: Provider id
            model_id: Model id
            fingerprint: Cache key identifying equivalent requests
            loader: Async callable making the outbound call
            ttl_ms: Result TTL (provider policy if None)
            timeout: Loader timeout in seconds (gateway default if None)

        Returns:
            Cached or freshly loaded result

        Raises:
            NotFoundError: If provider unknown
            ProviderInactiveError: If provider deactivated
            ModelUnavailableError: If provider does not serve model_id
            RateLimitExceededError: If a miss finds the budget spent
            ProviderError: If the loader fails or times out
            ValidationError: If fingerprint is empty
        """
        self._cache.validate_key(fingerprint)
        self._registry.resolve_model(provider_id, model_id)
        provider = self._registry.get(provider_id)
        ttl = ttl_ms if ttl_ms is not None else provider.rate_limit.response_ttl_ms
        guarded = self._guard(provider_id, loader, timeout)

        if self.is_cached(fingerprint):
            return await self._cache.get_or_compute(fingerprint, guarded, ttl)

        self._ensure_policy(provider)
        if not self._rate_limiter.admit(provider_id):
            info = self._rate_limiter.info(provider_id)
            raise RateLimitExceededError(
                f"Rate limit exceeded for provider '{provider_id}'",
                info=info,
                retry_after_ms=info.reset_in_ms,
            )

        return await self._cache.get_or_compute(fingerprint, guarded, ttl)

    def is_cached(self, fingerprint: str) -> bool:
        """Check if a request would be served without a new outbound call."""
        return self._cache.has(fingerprint) or self._cache.is_pending(fingerprint)

    def rate_limit_info(self, provider_id: str) -> RateLimitInfo:
        """
        Rate window view for a provider.

        Raises:
            NotFoundError: If provider unknown
        """
        self._ensure_policy(self._registry.get(provider_id))
        return self._rate_limiter.info(provider_id)

    def rate_limits(self) -> Dict[str, RateLimitInfo]:
        """Rate window view for every provider."""
        return {pid: self.rate_limit_info(pid) for pid in self._registry.list_ids()}

    def update_provider(self, provider_id: str, changes: Dict[str, Any]) -> Provider:
        """Update a provider and apply its rate limit policy."""
        provider = self._registry.update(provider_id, changes)
        self._rate_limiter.register(provider.id, provider.rate_limit)
        return provider

    async def _probe(self, provider: Provider, timeout: Optional[float]) -> bool:
        try:
            return await self._probe_timeout.execute(
                lambda: self._transport.probe(provider), timeout, provider.id
            )
        except ProviderError as e:
            logger.warning("Provider probe failed", provider=provider.id, error=str(e))
            return False

    def _guard(
        self, provider_id: str, loader: Loader, timeout: Optional[float]
    ) -> Loader:
        """Bound the loader by a timeout and map foreign errors to ProviderError."""

        async def guarded() -> Any:
            try:
                return await self._dispatch_timeout.execute(loader, timeout, provider_id)
            except AppError:
                raise
            except Exception as e:
                raise ProviderError(
                    f"Provider '{provider_id}' call failed: {type(e).__name__} - {e}"
                ) from e

        return guarded

    def _ensure_policy(self, provider: Provider) -> None:
        if not self._rate_limiter.has_provider(provider.id):
            self._rate_limiter.register(provider.id, provider.rate_limit)
