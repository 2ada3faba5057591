"""
Service wiring.

Builds the explicitly constructed services shared by the API and tests.
"""

from dataclasses import dataclass
from typing import Optional

from modelgate.cache.cache_manager import CacheManager
from modelgate.catalog import build_registry
from modelgate.config import AppConfig
from modelgate.llm.openai_transport import OpenAICompatibleTransport
from modelgate.llm.rate_limiter import RateLimiter
from modelgate.llm.registry import ProviderRegistry
from modelgate.llm.retry import RetryConfig, RetryHandler
from modelgate.llm.transport import BaseTransport
from modelgate.services.chat_service import ChatService
from modelgate.services.conversation_store import ConversationStore
from modelgate.services.gateway import ProviderGateway
from modelgate.utils.clock import Clock, system_clock


@dataclass
class ServiceContainer:
    """Every service of one gateway instance."""

    registry: ProviderRegistry
    rate_limiter: RateLimiter
    cache: CacheManager
    store: ConversationStore
    gateway: ProviderGateway
    chat: ChatService

    @classmethod
    def from_config(
        cls,
        settings: AppConfig,
        clock: Clock = system_clock,
        transport: Optional[BaseTransport] = None,
        registry: Optional[ProviderRegistry] = None,
    ) -> "ServiceContainer":
        """
        Build services from configuration.

        Args:
            settings: Application configuration
            clock: Epoch-millisecond clock shared by every service
            transport: Outbound transport (OpenAI-compatible if None)
            registry: Provider registry (loaded from the catalog if None)

        Returns:
            Wired services
        """
        registry = registry or build_registry(settings.provider_catalog_path, clock=clock)
        rate_limiter = RateLimiter(registry.rate_limit_policies(), clock=clock)
        cache = CacheManager(
            max_entries=settings.cache_max_entries,
            default_ttl_ms=settings.cache_default_ttl_ms,
            clock=clock,
        )
        store = ConversationStore(settings.max_conversations, clock=clock)
        if transport is None:
            transport = OpenAICompatibleTransport(
                settings.api_keys(), timeout_seconds=settings.dispatch_timeout_seconds
            )
        gateway = ProviderGateway(
            registry,
            rate_limiter,
            cache,
            transport=transport,
            clock=clock,
            probe_timeout_seconds=settings.probe_timeout_seconds,
            dispatch_timeout_seconds=settings.dispatch_timeout_seconds,
        )
        chat = ChatService(
            gateway,
            store,
            default_provider=settings.default_provider,
            default_model=settings.default_model,
            history_limit=settings.history_limit,
            retry_handler=RetryHandler(
                RetryConfig(
                    max_attempts=settings.retry_attempts,
                    initial_delay=settings.retry_initial_delay,
                )
            ),
        )
        return cls(registry, rate_limiter, cache, store, gateway, chat)

    async def close(self) -> None:
        """Release outbound clients and pending timers."""
        self.cache.clear()
        transport = self.gateway.transport
        if isinstance(transport, OpenAICompatibleTransport):
            await transport.close()
