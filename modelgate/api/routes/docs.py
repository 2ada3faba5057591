"""
API Documentation configuration.

Sandi Metz Principles:
- Single Responsibility: API documentation
- Clear naming: Descriptive tags and descriptions
"""

# API Tags metadata for OpenAPI documentation
TAGS_METADATA = [
    {
        "name": "health",
        "description": "Liveness and readiness probes, including provider health.",
    },
    {
        "name": "providers",
        "description": "Provider catalog, selection, status and model management.",
    },
    {
        "name": "conversations",
        "description": "Conversation logs used as request context.",
    },
    {
        "name": "chat",
        "description": "Send a message to the selected provider.",
    },
    {
        "name": "metrics",
        "description": "Cache, rate limit and conversation metrics.",
    },
]


# API Description
API_DESCRIPTION = """
# ModelGate API

**Provider mediation layer** for a multi-provider chatbot. Routes messages to
OpenAI-compatible providers (OpenAI, Groq, Gemini, OpenRouter).

## Features

- **Provider catalog**: activate, deactivate and extend providers at runtime
- **Rate limiting**: sliding-window request budget per provider
- **Response cache**: identical requests within the TTL are served from memory
  and do not consume rate budget
- **Health checks**: per-provider probes that never fail the request

## Errors

Every error body carries an `error_code`, a user-facing `title`, `message`
and `suggestions`. A spent provider budget returns `429` with `Retry-After`.
"""
