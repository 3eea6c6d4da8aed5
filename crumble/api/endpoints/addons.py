"""
Addon Management Endpoints
List, add, enable/disable and remove external addons
"""
from fastapi import APIRouter, Depends, HTTPException, Path
from fastapi.responses import JSONResponse
from crumble.api.deps import get_aggregator, get_cache, get_manager, get_registry
from crumble.core.exceptions import AddonNotFoundError, ManifestFetchError, ManifestInvalidError
from crumble.models.addon import AddAddonRequest, AddonStatusRequest
from crumble.services.addons import AddonManager
from crumble.services.aggregator import AddonAggregator
from crumble.services.cache import AddonCache
from crumble.services.registry import AddonRegistry
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/addons", tags=["addons"])


def manifest_error_to_http(exc: Exception) -> HTTPException:
    """Map loader failures to an actionable status for the settings page"""
    if isinstance(exc, ManifestInvalidError):
        return HTTPException(
            status_code=422,
            detail={"message": "Addon manifest is invalid", "errors": exc.errors, "url": exc.url},
        )
    if isinstance(exc, ManifestFetchError):
        status_code = 504 if exc.timeout else 502
        return HTTPException(
            status_code=status_code,
            detail={"message": f"Could not fetch addon manifest: {exc.reason}", "url": exc.url},
        )
    return HTTPException(status_code=500, detail={"message": str(exc)})


@router.get("")
async def list_addons(registry: AddonRegistry = Depends(get_registry)):
    """Registered addons, enabled or not"""
    addons = [addon.model_dump() for addon in registry.list()]
    return {"success": True, "addons": addons, "count": len(addons)}


@router.get("/available")
async def list_available_addons(manager: AddonManager = Depends(get_manager)):
    """Configured addons with their load state"""
    addons = manager.list_available()
    return {"success": True, "addons": addons, "count": len(addons)}


@router.get("/health")
async def addon_health(aggregator: AddonAggregator = Depends(get_aggregator)):
    return {"success": True, "health": aggregator.health_status()}


@router.post("", status_code=201)
async def add_addon(request: AddAddonRequest, manager: AddonManager = Depends(get_manager)):
    """Fetch, validate and register an addon by URL"""
    try:
        descriptor = await manager.add(request.url)
    except (ManifestFetchError, ManifestInvalidError) as exc:
        logger.warning(f"Failed to add addon from {request.url}: {exc}")
        raise manifest_error_to_http(exc)

    return {
        "success": True,
        "message": "Addon added successfully",
        "addon": descriptor.model_dump(),
    }


@router.patch("/{addon_id}")
async def set_addon_status(
    request: AddonStatusRequest,
    addon_id: str = Path(..., description="Addon id"),
    manager: AddonManager = Depends(get_manager),
):
    """Enable or disable an addon"""
    try:
        descriptor = await manager.set_enabled(addon_id, request.enabled)
    except AddonNotFoundError:
        raise HTTPException(status_code=404, detail={"message": "Addon not found", "id": addon_id})
    except (ManifestFetchError, ManifestInvalidError) as exc:
        raise manifest_error_to_http(exc)

    return {
        "success": True,
        "message": f"Addon {'enabled' if request.enabled else 'disabled'} successfully",
        "addon": descriptor.model_dump() if descriptor else None,
    }


@router.delete("/{addon_id}")
async def remove_addon(
    addon_id: str = Path(..., description="Addon id"),
    manager: AddonManager = Depends(get_manager),
):
    try:
        manager.remove(addon_id)
    except AddonNotFoundError:
        raise HTTPException(status_code=404, detail={"message": "Addon not found", "id": addon_id})

    return {"success": True, "message": "Addon removed successfully", "id": addon_id}


@router.post("/cache/clear")
async def clear_cache(cache: AddonCache = Depends(get_cache)):
    cleared = cache.clear()
    return JSONResponse({"success": True, "message": "Cache cleared successfully", "cleared": cleared})
