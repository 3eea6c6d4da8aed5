"""
Health Check Endpoint
"""
from fastapi import APIRouter, Depends, Query
from crumble.api.deps import get_aggregator, get_cache
from crumble.core.config import settings
from crumble.services.aggregator import AddonAggregator
from crumble.services.cache import AddonCache

router = APIRouter()


@router.get("/health")
@router.get("/api/health")
async def health_check(
    include_cache: bool = Query(False, description="Include addon cache metrics"),
    aggregator: AddonAggregator = Depends(get_aggregator),
    cache: AddonCache = Depends(get_cache),
):
    """Health check endpoint for monitoring"""
    payload = {
        "status": "ok",
        "message": "CRUMBLE BFF server is running",
        "version": "1.0.0",
        "base_url": settings.BASE_URL,
        "addons": {
            "registered": len(aggregator.registry),
            "enabled": len(aggregator.registry.list_enabled()),
        },
    }

    if include_cache:
        payload["cache"] = cache.metrics_snapshot()

    return payload
