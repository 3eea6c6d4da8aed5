"""
Content Endpoints
Unified discover/search/stream/meta endpoints for the frontend
"""
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from fastapi.responses import JSONResponse
from crumble.api.deps import get_aggregator, get_normalizer
from crumble.core.exceptions import AddonCallError, AddonDisabledError, AddonNotFoundError
from crumble.services.aggregator import AddonAggregator
from crumble.services.normalizer import ResponseNormalizer
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("/discover/{type}/{category}")
async def discover(
    request: Request,
    type: str = Path(..., description="Content type: movie or series"),
    category: str = Path(..., description="Catalog id, e.g. top or trending"),
    normalizer: ResponseNormalizer = Depends(get_normalizer),
):
    """
    Catalog by type and category

    Any query parameters (skip, genre, nocache, ...) are forwarded to the
    addons as catalog extras.
    """
    extra = dict(request.query_params)
    logger.info(f"Discover {type}/{category} extra={extra}")
    return await normalizer.discover(type, category, extra)


@router.get("/search/{query}")
async def search(
    query: str = Path(..., description="Search text"),
    type: Optional[str] = Query(None, description="Restrict to movie or series"),
    normalizer: ResponseNormalizer = Depends(get_normalizer),
):
    return await normalizer.search(query, type)


@router.get("/stream/{id}")
async def streams(
    id: str = Path(..., description="Content id, e.g. tt0111161"),
    type: str = Query("movie"),
    normalizer: ResponseNormalizer = Depends(get_normalizer),
):
    return await normalizer.streams(id, type)


@router.get("/meta/{id}")
async def meta(
    id: str = Path(..., description="Content id, e.g. tt0111161"),
    type: str = Query("movie"),
    normalizer: ResponseNormalizer = Depends(get_normalizer),
):
    return await normalizer.meta(id, type)


@router.get("/addon/{addon_id}/{resource}/{id}")
async def addon_content(
    request: Request,
    addon_id: str = Path(..., description="Addon id"),
    resource: str = Path(..., description="catalog, meta, stream or subtitles"),
    id: str = Path(..., description="Catalog or content id"),
    type: str = Query("movie"),
    normalizer: ResponseNormalizer = Depends(get_normalizer),
    aggregator: AddonAggregator = Depends(get_aggregator),
):
    """Query one specific addon directly; errors are reported, not masked"""
    extra = {k: v for k, v in request.query_params.items() if k != "type"}
    context = {"addonId": addon_id, "resource": resource, "id": id, "type": type}

    try:
        data = await aggregator.get_addon_resource(addon_id, resource, type, id, extra)
    except AddonNotFoundError:
        raise HTTPException(status_code=404, detail={"message": "Addon not found", **context})
    except AddonDisabledError:
        raise HTTPException(status_code=409, detail={"message": "Addon is disabled", **context})
    except ValueError as exc:
        raise HTTPException(status_code=400, detail={"message": str(exc), **context})
    except AddonCallError as exc:
        logger.warning(f"Direct addon query failed: {exc}")
        return JSONResponse(
            status_code=502,
            content=normalizer.envelope(
                None, "specific_addon", success=False, error=exc.reason, **context
            ),
        )

    return normalizer.envelope(data, "specific_addon", **context)


@router.get("/health")
async def content_health(aggregator: AddonAggregator = Depends(get_aggregator)):
    return {
        "success": True,
        "data": aggregator.health_status(),
        "metadata": {"timestamp": datetime.now(timezone.utc).isoformat()},
    }
