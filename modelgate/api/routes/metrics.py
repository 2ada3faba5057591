"""
Metrics endpoint for monitoring.

Sandi Metz Principles:
- Single Responsibility: Metrics exposure
- Observable: All key metrics tracked
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from modelgate import __version__
from modelgate.api.deps import get_cache, get_services
from modelgate.cache.cache_manager import CacheManager
from modelgate.config import config
from modelgate.services.container import ServiceContainer

router = APIRouter()


@router.get("/metrics")
async def get_metrics(
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> Dict[str, Any]:
    """
    Get application metrics.

    Returns:
        Dictionary of metrics
    """
    cache_stats = services.cache.stats()
    return {
        "application": {
            "name": config.app_name,
            "environment": config.app_env,
            "version": __version__,
        },
        "cache": {
            "size": cache_stats.size,
            "max_entries": cache_stats.max_entries,
            "hits": cache_stats.hits,
            "misses": cache_stats.misses,
            "coalesced": cache_stats.coalesced,
            "evictions": cache_stats.evictions,
            "expirations": cache_stats.expirations,
            "in_flight": cache_stats.in_flight,
            "hit_rate": cache_stats.hit_rate,
        },
        "providers": {
            "total": len(services.registry.list_all()),
            "active": len(services.registry.list_active()),
        },
        "rate_limits": {
            provider_id: info.model_dump(mode="json")
            for provider_id, info in services.gateway.rate_limits().items()
        },
        "conversations": {"count": len(services.store)},
    }


@router.delete("/cache")
async def clear_cache(
    cache: CacheManager = Depends(get_cache),  # noqa: B008
) -> Dict[str, int]:
    """Drop every memoized response; in-flight loads are unaffected."""
    cleared = len(cache)
    cache.clear()
    return {"cleared": cleared}
