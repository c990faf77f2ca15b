"""Cache administration API router."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query

from model_tracker.dependencies import get_cache
from model_tracker.schemas.portfolio import CacheClearResponse, CacheStats
from model_tracker.services.cache_service import CacheService

router = APIRouter(prefix="/api/cache", tags=["cache"])


@router.post("/clear", response_model=CacheClearResponse)
async def clear_cache(
    key: str | None = Query(None, description="Single key to clear; all keys when omitted"),
    cache: CacheService = Depends(get_cache),
):
    """Drop cached portfolio views so the next request refetches."""
    if key:
        cache.clear(key)
        message = f"Cache cleared for {key}"
    else:
        cache.clear_all()
        message = "Cache cleared successfully"
    return CacheClearResponse(message=message, cleared_at=datetime.now(UTC))


@router.get("/stats", response_model=CacheStats)
async def get_cache_stats(cache: CacheService = Depends(get_cache)):
    return CacheStats(**cache.stats())
