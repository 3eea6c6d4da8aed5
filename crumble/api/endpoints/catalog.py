"""
Stremio Resource Endpoints
catalog/meta/stream in the raw Stremio shape, backed by the aggregator
"""
from fastapi import APIRouter, Depends, Path, Request
from crumble.api.deps import get_aggregator, get_fallback
from crumble.models.stremio import CatalogResponse, MetaResponse, StreamResponse
from crumble.services.aggregator import AddonAggregator
from crumble.services.fallback import FallbackProvider
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["stremio"])


@router.get("/catalog/{type}/{id}.json")
async def get_catalog(
    request: Request,
    type: str = Path(..., description="Content type: movie or series"),
    id: str = Path(..., description="Catalog ID"),
    aggregator: AddonAggregator = Depends(get_aggregator),
    fallback: FallbackProvider = Depends(get_fallback),
):
    """Aggregated catalog; falls back to demo content when addons return nothing"""
    try:
        metas = (await aggregator.get_catalog(type, id, dict(request.query_params)))["metas"]
    except Exception as e:
        logger.error(f"Error generating catalog {type}/{id}: {e}", exc_info=True)
        metas = []

    if not metas:
        logger.info(f"No results from external addons for {type}/{id}, using fallback data")
        metas = fallback.mock_catalog(type, id)

    logger.info(f"Catalog {type}/{id} returned {len(metas)} items")
    return CatalogResponse.model_validate({"metas": metas}).model_dump(exclude_none=True)


@router.get("/meta/{type}/{id}.json")
async def get_meta(
    type: str = Path(..., description="Content type: movie or series"),
    id: str = Path(..., description="Content id"),
    aggregator: AddonAggregator = Depends(get_aggregator),
    fallback: FallbackProvider = Depends(get_fallback),
):
    try:
        meta = (await aggregator.get_meta(type, id))["meta"]
    except Exception as e:
        logger.error(f"Error fetching meta {type}/{id}: {e}", exc_info=True)
        meta = None

    if meta is None:
        meta = fallback.mock_meta(type, id) or fallback.placeholder_meta(type, id)

    return MetaResponse.model_validate({"meta": meta}).model_dump(exclude_none=True)


@router.get("/stream/{type}/{id}.json")
async def get_streams(
    type: str = Path(..., description="Content type: movie or series"),
    id: str = Path(..., description="Content id"),
    aggregator: AddonAggregator = Depends(get_aggregator),
    fallback: FallbackProvider = Depends(get_fallback),
):
    try:
        streams = (await aggregator.get_streams(type, id))["streams"]
    except Exception as e:
        logger.error(f"Error fetching streams {type}/{id}: {e}", exc_info=True)
        streams = []

    if not streams:
        streams = fallback.mock_streams(type, id)

    return StreamResponse.model_validate({"streams": streams}).model_dump(exclude_none=True)
