"""
API Routes module.

Contains all API endpoint routers.
"""

from modelgate.api.routes import chat, conversations, docs, health, metrics, providers

__all__ = ["health", "providers", "conversations", "chat", "metrics", "docs"]
