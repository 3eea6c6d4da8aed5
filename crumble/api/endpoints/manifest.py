"""
Manifest Endpoints
Serves this addon's own manifest and proxies/validates third-party manifests
"""
import logging
from fastapi import APIRouter, Depends, Query, Response
from crumble.api.deps import get_loader
from crumble.api.endpoints.addons import manifest_error_to_http
from crumble.core.exceptions import ManifestFetchError
from crumble.models.stremio import Manifest
from crumble.services.loader import AddonLoader

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/manifest.json")
async def get_manifest(response: Response):
    """Return the manifest of the BFF's own Stremio addon surface"""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return Manifest().model_dump()


@router.get("/api/manifest/proxy")
async def proxy_manifest(
    url: str = Query(..., min_length=1, description="Addon transport or manifest URL"),
    loader: AddonLoader = Depends(get_loader),
):
    """Fetch a third-party manifest on behalf of the browser"""
    try:
        _, manifest = await loader.fetch_manifest(url)
    except ManifestFetchError as exc:
        logger.warning(f"Manifest proxy failed for {url}: {exc.reason}")
        raise manifest_error_to_http(exc)
    return manifest


@router.get("/api/manifest/validate")
async def validate_manifest(
    url: str = Query(..., min_length=1, description="Addon transport or manifest URL"),
    loader: AddonLoader = Depends(get_loader),
):
    """Validate an addon URL without registering it"""
    try:
        validation = await loader.validate(url)
    except ManifestFetchError as exc:
        raise manifest_error_to_http(exc)

    logger.info(
        "Addon validation %s for %s",
        "successful" if validation["valid"] else "failed",
        validation["url"],
    )
    return {"success": True, "validation": validation}
