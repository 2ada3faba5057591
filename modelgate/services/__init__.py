"""
Services module.

Contains business logic services for the application.
"""

from modelgate.services.chat_service import ChatService
from modelgate.services.container import ServiceContainer
from modelgate.services.conversation_store import ConversationStore
from modelgate.services.gateway import ProviderGateway

__all__ = ["ChatService", "ConversationStore", "ProviderGateway", "ServiceContainer"]
