"""
Addon Aggregator
Capability-routed fan-out to registered addons with merge, dedupe and caching
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple
from pydantic import ValidationError
from crumble.core.config import settings
from crumble.core.exceptions import AddonCallError, AddonDisabledError, AddonNotFoundError, TransportError
from crumble.models.addon import RESOURCES, AddonDescriptor
from crumble.models.stremio import MetaItem, StreamItem, SubtitleItem
from crumble.services.cache import AddonCache, CacheKey
from crumble.services.registry import AddonRegistry
from crumble.services.transport import AddonTransport
from crumble.utils.helpers import deduplicate_by_key, is_truthy_flag, map_catalog_id, sanitize_title

logger = logging.getLogger(__name__)

# Response field carrying the payload for each resource
RESOURCE_FIELDS = {
    "catalog": "metas",
    "meta": "meta",
    "stream": "streams",
    "subtitles": "subtitles",
}

# One addon's outcome in a fan-out: (addon, items, succeeded)
Contribution = Tuple[AddonDescriptor, List[Dict[str, Any]], bool]


def _require(**fields: Optional[str]):
    for name, value in fields.items():
        if not value or not str(value).strip():
            raise ValueError(f"Request field '{name}' must be a non-empty string")


def _salvage_meta(entry: Dict[str, Any]) -> Optional[MetaItem]:
    """Reduce an item that failed validation to {id, type, name} when it has an id"""
    item_id = entry.get("id")
    if not isinstance(item_id, (str, int)) or not str(item_id).strip():
        return None
    fields = {k: entry[k] for k in ("type", "name") if isinstance(entry.get(k), str)}
    return MetaItem(id=str(item_id).strip(), **fields)


def _normalize_items(raw: Any, model, media_type: Optional[str] = None) -> List[Dict[str, Any]]:
    """Validate an addon's list payload into fresh dicts, skipping unusable entries"""
    if not isinstance(raw, list):
        return []

    items = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            item = model.model_validate(entry)
        except ValidationError as exc:
            item = _salvage_meta(entry) if model is MetaItem else None
            if item is None:
                logger.debug("Skipping malformed %s entry: %s", model.__name__, exc.errors()[:1])
                continue
            logger.debug("Kept identity fields of malformed meta %s: %s", item.id, exc.errors()[:1])
        if media_type and isinstance(item, MetaItem) and item.type is None:
            item.type = media_type
        items.append(item.model_dump(exclude_none=True))
    return items


class AddonAggregator:
    """
    Answers catalog/meta/stream/subtitles/search queries across addons.

    Fan-out calls are awaited jointly and merged in registry order, never
    in response-arrival order, so results are deterministic.
    """

    def __init__(
        self,
        registry: AddonRegistry,
        cache: AddonCache,
        transport: AddonTransport,
        call_timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.cache = cache
        self.transport = transport
        self.call_timeout = call_timeout if call_timeout is not None else settings.ADDON_REQUEST_TIMEOUT

    async def _query_addon(
        self,
        addon: AddonDescriptor,
        resource: str,
        media_type: str,
        item_id: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Single bounded call to one addon

        Raises:
            AddonCallError: on transport failure, timeout or a non-object body
        """
        url = addon.resource_url(resource, media_type, item_id)
        try:
            response = await asyncio.wait_for(
                self.transport.get_json(url, params=extra or None),
                timeout=self.call_timeout,
            )
        except asyncio.TimeoutError:
            raise AddonCallError(addon.id, url, f"timed out after {self.call_timeout}s")
        except TransportError as exc:
            raise AddonCallError(addon.id, url, exc.reason) from exc

        if not isinstance(response, dict):
            raise AddonCallError(addon.id, url, "response is not a JSON object")
        return response

    async def _fan_out(
        self,
        addons: List[Tuple[AddonDescriptor, str, str, Dict[str, Any]]],
        resource: str,
        model,
        media_type: Optional[str] = None,
    ) -> List[Contribution]:
        """
        Query every (addon, type, id, extra) target concurrently

        A failing addon contributes an empty list; the others are unaffected.
        """
        field = RESOURCE_FIELDS[resource]
        results = await asyncio.gather(
            *(self._query_addon(addon, resource, m_type, i_id, extra) for addon, m_type, i_id, extra in addons),
            return_exceptions=True,
        )

        contributions: List[Contribution] = []
        for (addon, _, _, _), result in zip(addons, results):
            if isinstance(result, Exception):
                logger.warning("Addon %s contributed nothing: %s", addon.name, result)
                contributions.append((addon, [], False))
                continue
            items = _normalize_items(result.get(field), model, media_type)
            logger.debug("Addon %s returned %d %s", addon.name, len(items), field)
            contributions.append((addon, items, True))
        return contributions

    def _store(self, key: CacheKey, value: Dict[str, Any], contributions: List[Contribution]):
        # Only cache when at least one addon actually answered
        if not any(ok for _, _, ok in contributions):
            return
        sources = [addon.id for addon, _, ok in contributions if ok]
        self.cache.set(key, value, sources=sources)

    async def get_catalog(
        self,
        media_type: str,
        catalog_id: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """
        Merged catalog from every addon declaring (type, catalog id)

        Items are concatenated in registry order and deduplicated by id,
        keeping the first occurrence.

        Returns:
            {"metas": [...]}; empty when no addon contributes
        """
        _require(type=media_type, id=catalog_id)
        extra = dict(extra or {})
        skip_cache = is_truthy_flag(extra.pop("nocache", False))
        catalog_id = map_catalog_id(catalog_id)

        key = CacheKey.build("catalog", media_type, catalog_id, extra)
        if skip_cache:
            self.cache.invalidate(key=key)
        else:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        addons = self.registry.find_supporting("catalog", media_type, catalog_id)
        logger.info("Catalog %s/%s: %d supporting addons", media_type, catalog_id, len(addons))
        if not addons:
            return {"metas": []}

        contributions = await self._fan_out(
            [(addon, media_type, catalog_id, extra) for addon in addons],
            "catalog",
            MetaItem,
            media_type,
        )
        merged = deduplicate_by_key([item for _, items, _ in contributions for item in items])
        response = {"metas": merged}

        if not skip_cache:
            self._store(key, response, contributions)
        logger.info("Catalog %s/%s: %d items after merge", media_type, catalog_id, len(merged))
        return response

    async def get_meta(self, media_type: str, item_id: str) -> Dict[str, Optional[Dict[str, Any]]]:
        """
        First non-null meta, probing addons one at a time in registry order

        Later addons are never called once an earlier one answers.

        Returns:
            {"meta": item or None}
        """
        _require(type=media_type, id=item_id)
        key = CacheKey.build("meta", media_type, item_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        addons = self.registry.find_supporting("meta", media_type, item_id=item_id)
        logger.info("Meta %s/%s: %d supporting addons", media_type, item_id, len(addons))

        for addon in addons:
            try:
                response = await self._query_addon(addon, "meta", media_type, item_id)
            except AddonCallError as exc:
                logger.warning("Meta lookup failed on %s: %s", addon.name, exc)
                continue

            items = _normalize_items([response.get("meta")], MetaItem, media_type)
            if items:
                result = {"meta": items[0]}
                self.cache.set(key, result, sources=[addon.id])
                return result

        return {"meta": None}

    async def get_streams(self, media_type: str, item_id: str) -> Dict[str, List[Dict[str, Any]]]:
        """
        Concatenated streams from every stream-capable addon

        Duplicates across addons are kept; each addon may offer a distinct
        source for the same content.
        """
        _require(type=media_type, id=item_id)
        key = CacheKey.build("streams", media_type, item_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        addons = self.registry.find_supporting("stream", media_type, item_id=item_id)
        logger.info("Streams %s/%s: %d supporting addons", media_type, item_id, len(addons))
        if not addons:
            return {"streams": []}

        contributions = await self._fan_out(
            [(addon, media_type, item_id, {}) for addon in addons],
            "stream",
            StreamItem,
        )
        response = {"streams": [item for _, items, _ in contributions for item in items]}
        self._store(key, response, contributions)
        return response

    async def get_subtitles(
        self,
        media_type: str,
        item_id: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Concatenated subtitles; same shape of fan-out as streams"""
        _require(type=media_type, id=item_id)
        extra = dict(extra or {})
        key = CacheKey.build("subtitles", media_type, item_id, extra)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        addons = self.registry.find_supporting("subtitles", media_type, item_id=item_id)
        if not addons:
            return {"subtitles": []}

        contributions = await self._fan_out(
            [(addon, media_type, item_id, extra) for addon in addons],
            "subtitles",
            SubtitleItem,
        )
        response = {"subtitles": [item for _, items, _ in contributions for item in items]}
        self._store(key, response, contributions)
        return response

    async def search(self, query: str, media_type: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        """
        Query every search-capable catalog of every enabled addon

        A catalog is search-capable when it declares a `search` extra.
        Results are merged and deduplicated by id like catalog aggregation.
        """
        query = sanitize_title(query or "")
        _require(query=query)
        key = CacheKey.build("search", media_type or "*", query.lower())
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        targets = []
        for addon in self.registry.list_enabled():
            if "catalog" not in addon.resources:
                continue
            for catalog in addon.search_catalogs(media_type):
                targets.append((addon, catalog.type, catalog.id, {"search": query}))

        logger.info("Search %r: %d search-capable catalogs", query, len(targets))
        if not targets:
            return {"metas": []}

        contributions = await self._fan_out(targets, "catalog", MetaItem)
        merged = deduplicate_by_key([item for _, items, _ in contributions for item in items])
        response = {"metas": merged}
        self._store(key, response, contributions)
        return response

    async def get_addon_resource(
        self,
        addon_id: str,
        resource: str,
        media_type: str,
        item_id: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Query one specific addon directly

        Raises:
            AddonNotFoundError: unknown addon id
            AddonDisabledError: the addon is registered but disabled
            ValueError: unknown resource
            AddonCallError: the addon call failed
        """
        _require(type=media_type, id=item_id)
        if resource not in RESOURCES:
            raise ValueError(f"Unknown resource: {resource}")
        addon = self.registry.get(addon_id)
        if addon is None:
            raise AddonNotFoundError(addon_id)
        if not addon.enabled:
            raise AddonDisabledError(addon_id)

        extra = dict(extra or {})
        key = CacheKey.build(resource, media_type, item_id, extra, addon_id=addon_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        response = await self._query_addon(addon, resource, media_type, item_id, extra)
        field = RESOURCE_FIELDS[resource]
        if resource == "meta":
            items = _normalize_items([response.get(field)], MetaItem, media_type)
            data = items[0] if items else None
        else:
            model = {"catalog": MetaItem, "stream": StreamItem, "subtitles": SubtitleItem}[resource]
            data = _normalize_items(response.get(field), model, media_type if resource == "catalog" else None)

        self.cache.set(key, data, sources=[addon_id])
        return data

    def health_status(self) -> Dict[str, Any]:
        """Counts of registered addons per capability plus per-addon detail"""
        addons = self.registry.list()
        enabled = [a for a in addons if a.enabled]
        status: Dict[str, Any] = {
            "total": len(addons),
            "enabled": len(enabled),
            "disabled": len(addons) - len(enabled),
        }
        for resource in RESOURCES:
            status[f"{resource}Support"] = sum(1 for a in enabled if resource in a.resources)
        status["details"] = [
            {
                "id": a.id,
                "name": a.name,
                "url": a.transport_url,
                "enabled": a.enabled,
                "resources": a.resources,
                "types": a.types,
                "catalogCount": len(a.catalogs),
            }
            for a in addons
        ]
        return status
