"""
Provider catalog source.

The built-in catalog lists the OpenAI-compatible providers the chatbot ships
with. A JSON file (a list of provider records, or an object with a
``providers`` list) replaces it when ``provider_catalog_path`` is set.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from modelgate.exceptions import ConfigurationError, ValidationError
from modelgate.llm.registry import ProviderRegistry
from modelgate.utils.clock import Clock, system_clock
from modelgate.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATALOG: List[Dict[str, Any]] = [
    {
        "id": "groq",
        "name": "Groq",
        "endpoint": "https://api.groq.com/openai/v1",
        "models": [
            {"model_id": "llama3-8b-8192", "name": "Llama 3 8B", "capabilities": ["text-generation"]},
            {"model_id": "llama3-70b-8192", "name": "Llama 3 70B", "capabilities": ["text-generation"]},
            {"model_id": "mixtral-8x7b-32768", "name": "Mixtral 8x7B", "capabilities": ["text-generation"]},
        ],
        "rate_limit": {"max_requests": 30, "window_ms": 60_000, "requests_per_day": 1000},
        "tier": "free",
    },
    {
        "id": "openai",
        "name": "OpenAI",
        "endpoint": "https://api.openai.com/v1",
        "models": [
            {"model_id": "gpt-4-turbo", "name": "GPT-4 Turbo", "capabilities": ["text-generation", "reasoning"]},
            {"model_id": "gpt-4", "name": "GPT-4", "capabilities": ["text-generation", "reasoning"]},
            {"model_id": "gpt-3.5-turbo", "name": "GPT-3.5 Turbo", "capabilities": ["text-generation"]},
        ],
        "rate_limit": {"max_requests": 10, "window_ms": 60_000, "requests_per_day": 200},
        "tier": "paid",
    },
    {
        "id": "gemini",
        "name": "Google Gemini",
        "endpoint": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "models": [
            {"model_id": "gemini-2.5-flash", "name": "Gemini 2.5 Flash", "capabilities": ["text-generation", "multimodal"]},
            {"model_id": "gemini-pro", "name": "Gemini Pro", "capabilities": ["text-generation", "multimodal"]},
        ],
        "rate_limit": {"max_requests": 10, "window_ms": 60_000, "requests_per_day": 250},
        "tier": "free",
    },
    {
        "id": "openrouter",
        "name": "OpenRouter",
        "endpoint": "https://openrouter.ai/api/v1",
        "models": [
            {"model_id": "z-ai/glm-4.5-air:free", "name": "GLM-4.5-Air (Free)", "capabilities": ["text-generation"]},
            {"model_id": "x-ai/grok-4.1-fast:free", "name": "Grok-4.1-Fast (Free)", "capabilities": ["text-generation"]},
        ],
        "rate_limit": {"max_requests": 20, "window_ms": 60_000, "requests_per_day": 50},
        "tier": "free",
    },
]


def load_catalog(path: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Load raw provider records.

    Args:
        path: JSON catalog file (built-in catalog if None)

    Returns:
        Provider records

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    if path is None:
        return [dict(record) for record in DEFAULT_CATALOG]

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read provider catalog '{path}': {e}") from e

    if isinstance(data, dict):
        data = data.get("providers")
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise ConfigurationError(
            f"Provider catalog '{path}' must be a list of provider objects"
        )
    return data


def build_registry(
    path: Optional[str] = None, clock: Clock = system_clock
) -> ProviderRegistry:
    """
    Build a provider registry from a catalog.

    Raises:
        ConfigurationError: With every catalog violation in one message
    """
    records = load_catalog(path)
    try:
        registry = ProviderRegistry.from_records(records, clock=clock)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e

    logger.info(
        "Provider catalog loaded",
        source=path or "built-in",
        providers=len(registry.list_all()),
    )
    return registry
