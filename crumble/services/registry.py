"""
Addon Registry
Single source of truth for which addons exist and whether they participate
"""
import logging
from typing import Dict, List, Optional

from crumble.core.exceptions import AddonNotFoundError
from crumble.models.addon import AddonDescriptor
from crumble.services.cache import AddonCache

logger = logging.getLogger(__name__)


class AddonRegistry:
    """Ordered id -> descriptor map; iteration order is registration order"""

    def __init__(self, cache: Optional[AddonCache] = None):
        self.cache = cache
        self._addons: Dict[str, AddonDescriptor] = {}

    def __len__(self) -> int:
        return len(self._addons)

    def __contains__(self, addon_id: str) -> bool:
        return addon_id in self._addons

    def register(self, descriptor: AddonDescriptor) -> AddonDescriptor:
        """
        Insert or replace a descriptor by id

        A replaced addon keeps its original position, so aggregation
        priority does not change when a manifest is reloaded.
        """
        if not descriptor.id:
            raise ValueError("Addon descriptor requires a non-empty id")

        replaced = descriptor.id in self._addons
        self._addons[descriptor.id] = descriptor
        if replaced and self.cache is not None:
            self.cache.invalidate(addon_id=descriptor.id)
        logger.info(
            "%s addon: %s (%s) at %s",
            "Updated" if replaced else "Registered",
            descriptor.name,
            descriptor.id,
            descriptor.transport_url,
        )
        return descriptor

    def unregister(self, addon_id: str) -> AddonDescriptor:
        """Remove a descriptor and every cache entry it fed"""
        descriptor = self._addons.pop(addon_id, None)
        if descriptor is None:
            raise AddonNotFoundError(addon_id)
        if self.cache is not None:
            self.cache.invalidate(addon_id=addon_id)
        logger.info("Removed addon: %s (%s)", descriptor.name, addon_id)
        return descriptor

    def set_enabled(self, addon_id: str, enabled: bool) -> AddonDescriptor:
        descriptor = self.get(addon_id)
        if descriptor is None:
            raise AddonNotFoundError(addon_id)

        descriptor.enabled = enabled
        if not enabled and self.cache is not None:
            self.cache.invalidate(addon_id=addon_id)
        logger.info("Addon %s %s", addon_id, "enabled" if enabled else "disabled")
        return descriptor

    def get(self, addon_id: str) -> Optional[AddonDescriptor]:
        return self._addons.get(addon_id)

    def list(self) -> List[AddonDescriptor]:
        return list(self._addons.values())

    def list_enabled(self) -> List[AddonDescriptor]:
        return [d for d in self._addons.values() if d.enabled]

    def find_supporting(
        self,
        resource: str,
        media_type: str,
        catalog_id: Optional[str] = None,
        item_id: Optional[str] = None,
    ) -> List[AddonDescriptor]:
        """
        Enabled addons declaring `resource` for `media_type`

        For catalog requests with a catalog id, the addon must also declare
        a catalog with that exact (type, id) pair. For item lookups the
        addon's id prefixes for that resource must match `item_id`.
        """
        matches = []
        for descriptor in self.list_enabled():
            if not descriptor.supports(resource, media_type, item_id):
                continue
            if resource == "catalog" and catalog_id is not None:
                if not descriptor.has_catalog(media_type, catalog_id):
                    continue
            matches.append(descriptor)
        return matches
