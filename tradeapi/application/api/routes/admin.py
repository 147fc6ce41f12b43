"""
Admin Routes
============

Operational endpoints for the cache-aside store.

    GET    /cache/stats    hit/miss/eviction counters, size and hit rate
    DELETE /cache          drop every cached entry (counters are kept)

In production these belong behind authentication or on an internal
port; the service itself does not enforce either.
"""

from fastapi import APIRouter, Response, status

from tradeapi.application.api.dependencies import CacheDep
from tradeapi.application.api.models.admin import CacheStatsResponse
from tradeapi.core.logging.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/cache", tags=["Admin"])


@router.get("/stats", response_model=CacheStatsResponse)
def cache_stats(cache: CacheDep):
    """
    Live cache statistics.

    A disabled cache reports zeros everywhere.
    """
    stats = cache.get_stats()
    return CacheStatsResponse(
        hit_count=stats.hit_count,
        miss_count=stats.miss_count,
        eviction_count=stats.eviction_count,
        size=stats.size,
        hit_rate=stats.hit_rate,
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_cache(cache: CacheDep):
    """Evict every entry."""
    cache.evict_all()
    logger.info("Cache cleared via admin endpoint")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
