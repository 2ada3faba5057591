"""
Cache key generation utilities.

Sandi Metz Principles:
- Single Responsibility: Fingerprint generation
- Small functions: Each does one thing
- Pure functions: No side effects
"""

import hashlib
import json
from typing import Any


def canonical_json(payload: Any) -> str:
    """
    Serialize payload deterministically.

    Args:
        payload: JSON-compatible value

    Returns:
        JSON text with sorted keys and no insignificant whitespace
    """
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
    )


def generate_fingerprint(provider_id: str, model_id: str, payload: Any) -> str:
    """
    Generate cache fingerprint for a provider request.

    Equivalent requests (same provider, model and payload) map to the same key.

    Args:
        provider_id: Provider id
        model_id: Model id
        payload: Request payload (messages, sampling parameters)

    Returns:
        Fingerprint (fp:<provider>:<model>:sha256hash)
    """
    body = canonical_json({"provider": provider_id, "model": model_id, "payload": payload})
    hash_value = hashlib.sha256(body.encode()).hexdigest()
    return f"fp:{provider_id}:{model_id}:{hash_value}"
