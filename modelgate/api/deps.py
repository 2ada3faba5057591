"""
API dependency injection.

Sandi Metz Principles:
- Single Responsibility: Dependency lookup and injection
- Dependency Inversion: Routes receive services, never build them
"""

from fastapi import Request

from modelgate.cache.cache_manager import CacheManager
from modelgate.llm.registry import ProviderRegistry
from modelgate.services.chat_service import ChatService
from modelgate.services.container import ServiceContainer
from modelgate.services.conversation_store import ConversationStore
from modelgate.services.gateway import ProviderGateway


def get_services(request: Request) -> ServiceContainer:
    """
    Get the services of the running application.

    Args:
        request: FastAPI request

    Returns:
        Service container built at startup
    """
    return request.app.state.app_state.services


def get_gateway(request: Request) -> ProviderGateway:
    return get_services(request).gateway


def get_registry(request: Request) -> ProviderRegistry:
    return get_services(request).registry


def get_store(request: Request) -> ConversationStore:
    return get_services(request).store


def get_cache(request: Request) -> CacheManager:
    return get_services(request).cache


def get_chat_service(request: Request) -> ChatService:
    return get_services(request).chat
