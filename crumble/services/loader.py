"""
Addon Loader
Turns a transport URL into a validated, registered AddonDescriptor
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Tuple
from crumble.core.config import AddonSeed
from crumble.core.exceptions import ManifestFetchError, ManifestInvalidError, TransportError
from crumble.models.addon import AddonCatalog, AddonDescriptor
from crumble.services.registry import AddonRegistry
from crumble.services.transport import AddonTransport
from crumble.utils.helpers import derive_addon_id, normalize_addon_url

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "resources", "types")
RECOMMENDED_FIELDS = ("id", "description")


def _resource_names(resources: Iterable[Any]) -> List[str]:
    # Manifests list resources either as plain names or as {name, types, idPrefixes}
    names = []
    for resource in resources:
        if isinstance(resource, str):
            names.append(resource)
        elif isinstance(resource, dict) and resource.get("name"):
            names.append(str(resource["name"]))
    return names


def _resource_overrides(resources: Iterable[Any], field: str) -> Dict[str, List[str]]:
    """Per-resource `types` or `idPrefixes` declared by object-form resources"""
    overrides = {}
    for resource in resources:
        if isinstance(resource, dict) and resource.get("name") and isinstance(resource.get(field), list):
            overrides[str(resource["name"])] = [str(value) for value in resource[field]]
    return overrides


def validate_manifest(manifest: Any) -> Tuple[List[str], List[str]]:
    """
    Check a manifest document

    Returns:
        (errors, warnings); the manifest is usable only when errors is empty
    """
    if not isinstance(manifest, dict):
        return ["Manifest is not a JSON object"], []

    errors = [f"Missing required field: {field}" for field in REQUIRED_FIELDS if not manifest.get(field)]
    for field in ("resources", "types"):
        if manifest.get(field) and not isinstance(manifest[field], list):
            errors.append(f"Field must be a list: {field}")
    warnings = [f"Recommended field missing: {field}" for field in RECOMMENDED_FIELDS if not manifest.get(field)]
    return errors, warnings


def build_descriptor(manifest: Dict[str, Any], base_url: str) -> AddonDescriptor:
    """Convert a validated manifest into a descriptor; raw JSON stops here"""
    resources = manifest.get("resources") or []
    catalogs = [
        AddonCatalog.from_manifest_entry(entry)
        for entry in manifest.get("catalogs") or []
        if isinstance(entry, dict) and entry.get("type") and entry.get("id")
    ]
    return AddonDescriptor(
        id=str(manifest.get("id") or derive_addon_id(base_url)),
        name=str(manifest["name"]),
        transport_url=base_url,
        description=str(manifest.get("description") or ""),
        version=str(manifest["version"]) if manifest.get("version") else None,
        resources=_resource_names(resources),
        types=[str(t) for t in manifest.get("types") or []],
        catalogs=catalogs,
        id_prefixes=[str(p) for p in manifest.get("idPrefixes") or []],
        resource_types=_resource_overrides(resources, "types"),
        resource_id_prefixes=_resource_overrides(resources, "idPrefixes"),
        enabled=True,
    )


class AddonLoader:
    """Fetches manifests and feeds the registry"""

    def __init__(self, registry: AddonRegistry, transport: AddonTransport):
        self.registry = registry
        self.transport = transport

    async def fetch_manifest(self, url: str) -> Tuple[str, Any]:
        """
        Fetch the raw manifest document

        Returns:
            (transport base URL, decoded manifest)

        Raises:
            ManifestFetchError: on bad URL, network error, timeout or non-2xx
        """
        try:
            base_url, manifest_url = normalize_addon_url(url)
        except ValueError as exc:
            raise ManifestFetchError(url, str(exc))

        logger.info("Fetching addon manifest from %s", manifest_url)
        try:
            manifest = await self.transport.get_json(manifest_url)
        except TransportError as exc:
            raise ManifestFetchError(manifest_url, exc.reason, status=exc.status, timeout=exc.timeout)
        return base_url, manifest

    async def validate(self, url: str) -> Dict[str, Any]:
        """Fetch and validate without registering"""
        base_url, manifest = await self.fetch_manifest(url)
        errors, warnings = validate_manifest(manifest)
        return {
            "valid": not errors,
            "url": base_url,
            "manifest": manifest,
            "errors": errors,
            "warnings": warnings,
        }

    async def load(self, url: str) -> AddonDescriptor:
        """
        Fetch, validate and register an addon

        The registry is only touched once the manifest has passed
        validation, so a failed load never leaves a partial entry.

        Raises:
            ManifestFetchError: manifest could not be fetched
            ManifestInvalidError: manifest lacks name, resources or types
        """
        base_url, manifest = await self.fetch_manifest(url)
        errors, warnings = validate_manifest(manifest)
        if errors:
            logger.warning("Rejected addon manifest from %s: %s", base_url, "; ".join(errors))
            raise ManifestInvalidError(base_url, errors)
        for warning in warnings:
            logger.debug("Manifest %s: %s", base_url, warning)

        descriptor = build_descriptor(manifest, base_url)
        return self.registry.register(descriptor)

    async def load_seeds(self, seeds: Iterable[AddonSeed]) -> Tuple[int, int]:
        """
        Load every enabled seed concurrently

        Returns:
            (loaded, failed) counts
        """
        enabled = [seed for seed in seeds if seed.enabled]
        if not enabled:
            logger.info("No seed addons configured")
            return 0, 0

        logger.info("Loading %d seed addons: %s", len(enabled), ", ".join(s.url for s in enabled))
        results = await asyncio.gather(
            *(self.load(seed.url) for seed in enabled),
            return_exceptions=True,
        )

        loaded = 0
        for seed, result in zip(enabled, results):
            if isinstance(result, BaseException):
                logger.warning("Failed to load seed addon %s: %s", seed.url, result)
                continue
            loaded += 1
            seed.id = result.id

        failed = len(enabled) - loaded
        if loaded == 0:
            logger.error("No addons could be loaded; content endpoints will serve fallback data")
        elif failed:
            logger.warning("%d addons failed to load, but %d are working", failed, loaded)
        else:
            logger.info("Addon initialization complete: %d loaded", loaded)
        return loaded, failed
