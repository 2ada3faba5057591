"""
Models package for ModelGate.

Exports all model classes for easy imports throughout the application.
"""

# Chat models
from modelgate.models.chat import ChatRequest, ChatResponse, UsageMetrics

# Conversation models
from modelgate.models.conversation import (
    Conversation,
    ConversationStats,
    Message,
    MessageRole,
)

# Error models
from modelgate.models.error import ErrorResponse

# Gateway models
from modelgate.models.gateway import HealthCheckResult, ProviderSelection, ProviderStatus

# Provider catalog models
from modelgate.models.provider import (
    ModelDescriptor,
    Provider,
    ProviderTier,
    RateLimitPolicy,
)

# Rate limiting models
from modelgate.models.ratelimit import RateLimitInfo

# Response models
from modelgate.models.response import HealthResponse, ReadinessResponse

__all__ = [
    # Chat
    "ChatRequest",
    "ChatResponse",
    "UsageMetrics",
    # Conversation
    "Conversation",
    "ConversationStats",
    "Message",
    "MessageRole",
    # Error
    "ErrorResponse",
    # Gateway
    "HealthCheckResult",
    "ProviderSelection",
    "ProviderStatus",
    # Provider
    "ModelDescriptor",
    "Provider",
    "ProviderTier",
    "RateLimitPolicy",
    # Rate Limiting
    "RateLimitInfo",
    # Response
    "HealthResponse",
    "ReadinessResponse",
]
