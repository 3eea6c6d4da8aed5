"""
Addon Management
Add/remove/enable/disable operations behind the settings page
"""
import logging
from typing import Any, Dict, List, Optional
from crumble.core.config import AddonSeed
from crumble.core.exceptions import AddonNotFoundError
from crumble.models.addon import AddonDescriptor
from crumble.services.cache import AddonCache
from crumble.services.loader import AddonLoader
from crumble.services.registry import AddonRegistry
from crumble.utils.helpers import derive_addon_id, normalize_addon_url

logger = logging.getLogger(__name__)


class AddonManager:
    """
    Write-side operations on the addon set.

    Keeps the list of configured ("available") addons alongside the
    registry so an addon that failed to load, or was never loaded, can
    still be enabled later by id.
    """

    def __init__(
        self,
        registry: AddonRegistry,
        loader: AddonLoader,
        cache: AddonCache,
        seeds: Optional[List[AddonSeed]] = None,
    ):
        self.registry = registry
        self.loader = loader
        self.cache = cache
        self.available: List[AddonSeed] = [seed.model_copy() for seed in seeds or []]
        for seed in self.available:
            if seed.id is None:
                seed.id = self._derived_seed_id(seed)

    async def initialize(self):
        """Load configured seeds and start from a clean cache"""
        loaded, failed = await self.loader.load_seeds(self.available)
        self.cache.clear()
        return loaded, failed

    def _seed_base_url(self, seed: AddonSeed) -> Optional[str]:
        try:
            return normalize_addon_url(seed.url)[0]
        except ValueError:
            return None

    def _derived_seed_id(self, seed: AddonSeed) -> Optional[str]:
        # Same id the loader gives a manifest that declares none
        base_url = self._seed_base_url(seed)
        return derive_addon_id(base_url) if base_url else None

    def _find_seed(self, addon_id: Optional[str] = None, url: Optional[str] = None) -> Optional[AddonSeed]:
        """Configured seed by id, or by transport URL when `url` is given"""
        base_url = None
        if url is not None:
            try:
                base_url = normalize_addon_url(url)[0]
            except ValueError:
                base_url = None
        for seed in self.available:
            if addon_id is not None and seed.id == addon_id:
                return seed
            if base_url is not None and self._seed_base_url(seed) == base_url:
                return seed
        return None

    async def add(self, url: str) -> AddonDescriptor:
        """
        Load an addon by URL and remember it as configured

        A configured addon with the same id or transport URL is updated
        instead of being listed twice.

        Raises:
            ManifestFetchError, ManifestInvalidError: surfaced to the caller
        """
        descriptor = await self.loader.load(url)
        seed = self._find_seed(descriptor.id, url=url)
        if seed is None:
            self.available.append(
                AddonSeed(
                    url=url,
                    enabled=True,
                    id=descriptor.id,
                    name=descriptor.name,
                    description=descriptor.description,
                )
            )
        else:
            seed.id = descriptor.id
            seed.enabled = True
        return descriptor

    def remove(self, addon_id: str) -> AddonDescriptor:
        """
        Unregister an addon and forget its configuration

        Raises:
            AddonNotFoundError: unknown id
        """
        descriptor = self.registry.unregister(addon_id)
        self.available = [seed for seed in self.available if seed.id != addon_id]
        return descriptor

    async def set_enabled(self, addon_id: str, enabled: bool) -> Optional[AddonDescriptor]:
        """
        Toggle participation in aggregation

        Enabling a configured addon that is not currently loaded reloads
        its manifest first. Disabling a configured addon that never loaded
        only updates its configuration and returns None.

        Raises:
            AddonNotFoundError: id is neither registered nor configured
            ManifestFetchError, ManifestInvalidError: reload failed
        """
        seed = self._find_seed(addon_id)
        if seed is not None:
            seed.enabled = enabled

        if addon_id in self.registry:
            return self.registry.set_enabled(addon_id, enabled)

        if seed is None:
            raise AddonNotFoundError(addon_id)
        if not enabled:
            return None

        logger.info("Addon %s enabled but not loaded, fetching %s", addon_id, seed.url)
        descriptor = await self.loader.load(seed.url)
        seed.id = descriptor.id
        return descriptor

    def list_available(self) -> List[Dict[str, Any]]:
        """Configured addons with their load state"""
        loaded_by_url = {a.transport_url: a for a in self.registry.list()}
        result = []
        for seed in self.available:
            descriptor = self.registry.get(seed.id) if seed.id else None
            if descriptor is None:
                descriptor = loaded_by_url.get(self._seed_base_url(seed))
            result.append(
                {
                    "id": descriptor.id if descriptor else seed.id,
                    "name": seed.name or (descriptor.name if descriptor else None),
                    "url": seed.url,
                    "description": seed.description,
                    "enabled": seed.enabled,
                    "loaded": descriptor is not None,
                    "resources": descriptor.resources if descriptor else [],
                }
            )
        return result
