"""
Pytest configuration and fixtures.

Provides common fixtures for testing.
"""

from typing import Any, Dict, List

import pytest

from modelgate.cache.cache_manager import CacheManager
from modelgate.catalog import DEFAULT_CATALOG
from modelgate.config import AppConfig
from modelgate.exceptions import ProviderError
from modelgate.llm.rate_limiter import RateLimiter
from modelgate.llm.registry import ProviderRegistry
from modelgate.llm.transport import BaseTransport, CompletionResult
from modelgate.models.provider import ModelDescriptor, Provider
from modelgate.services.conversation_store import ConversationStore
from modelgate.services.gateway import ProviderGateway
from modelgate.utils.clock import ManualClock


class FakeTransport(BaseTransport):
    """Transport that records calls instead of using the network."""

    def __init__(self, reply: str = "Hello from the model", reachable: bool = True):
        self.reply = reply
        self.reachable = reachable
        self.fail_with: Exception | None = None
        self.calls: List[Dict[str, Any]] = []
        self.probes: List[str] = []

    async def complete(
        self,
        provider: Provider,
        model: ModelDescriptor,
        payload: Dict[str, Any],
    ) -> CompletionResult:
        self.calls.append(
            {"provider": provider.id, "model": model.model_id, "payload": payload}
        )
        if self.fail_with is not None:
            raise self.fail_with
        return CompletionResult(
            content=self.reply,
            model=model.model_id,
            provider_id=provider.id,
            prompt_tokens=10,
            completion_tokens=5,
        )

    async def probe(self, provider: Provider) -> bool:
        self.probes.append(provider.id)
        if self.fail_with is not None:
            raise self.fail_with
        return self.reachable


@pytest.fixture
def clock() -> ManualClock:
    """
    Create a manual clock.

    Returns:
        Clock frozen until advanced
    """
    return ManualClock()


@pytest.fixture
def test_config() -> AppConfig:
    """
    Create test configuration.

    Returns:
        Test configuration instance
    """
    return AppConfig(
        app_env="development",
        groq_api_key="test-key",
        openai_api_key="test-key",
        cache_max_entries=10,
        max_conversations=5,
        retry_attempts=1,
        retry_initial_delay=0.0,
    )


@pytest.fixture
def provider_data() -> Dict[str, Any]:
    """
    Raw data for a valid provider.

    Returns:
        Provider record
    """
    return {
        "id": "acme",
        "name": "Acme AI",
        "endpoint": "https://api.acme.test/v1",
        "models": [
            {"model_id": "acme-small", "name": "Acme Small", "capabilities": ["text-generation"]},
            {"model_id": "acme-large", "name": "Acme Large"},
        ],
        "rate_limit": {"max_requests": 3, "window_ms": 60_000},
        "tier": "free",
    }


@pytest.fixture
def registry(clock: ManualClock) -> ProviderRegistry:
    """
    Registry loaded with the built-in catalog.

    Returns:
        Provider registry
    """
    return ProviderRegistry.from_records(DEFAULT_CATALOG, clock=clock)


@pytest.fixture
def rate_limiter(registry: ProviderRegistry, clock: ManualClock) -> RateLimiter:
    """Rate limiter wired with the catalog policies."""
    return RateLimiter(registry.rate_limit_policies(), clock=clock)


@pytest.fixture
def cache(clock: ManualClock) -> CacheManager:
    """Small cache on the manual clock."""
    return CacheManager(max_entries=10, default_ttl_ms=60_000, clock=clock)


@pytest.fixture
def store(clock: ManualClock) -> ConversationStore:
    """Conversation store holding at most 3 conversations."""
    return ConversationStore(max_conversations=3, clock=clock)


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Network-free transport."""
    return FakeTransport()


@pytest.fixture
def failing_transport() -> FakeTransport:
    """Transport whose calls fail with a provider error."""
    transport = FakeTransport()
    transport.fail_with = ProviderError("upstream returned 503")
    return transport


@pytest.fixture
def gateway(
    registry: ProviderRegistry,
    rate_limiter: RateLimiter,
    cache: CacheManager,
    fake_transport: FakeTransport,
    clock: ManualClock,
) -> ProviderGateway:
    """Gateway over the fixtures above."""
    return ProviderGateway(
        registry,
        rate_limiter,
        cache,
        transport=fake_transport,
        clock=clock,
        probe_timeout_seconds=1.0,
        dispatch_timeout_seconds=1.0,
    )
