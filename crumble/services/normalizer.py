"""
Response Normalizer
Wraps aggregator or fallback output into the uniform frontend envelope
"""
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional
from crumble.models.responses import (
    SOURCE_ADDONS,
    SOURCE_MOCK_FALLBACK,
    SOURCE_MOCK_FALLBACK_ERROR,
    Envelope,
    EnvelopeMetadata,
)
from crumble.services.aggregator import AddonAggregator
from crumble.services.fallback import FallbackProvider

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _count(data: Any) -> int:
    if data is None:
        return 0
    if isinstance(data, list):
        return len(data)
    return 1


class ResponseNormalizer:
    """
    Builds `{success, data, metadata}` for every read endpoint.

    Read endpoints degrade instead of failing: empty aggregator output is
    replaced by fallback data, and an aggregator exception still produces
    a successful envelope tagged `mock_fallback_error`.
    """

    def __init__(self, aggregator: AddonAggregator, fallback: FallbackProvider):
        self.aggregator = aggregator
        self.fallback = fallback

    def envelope(
        self,
        data: Any,
        source: str,
        count_field: str = "itemCount",
        error: Optional[str] = None,
        success: bool = True,
        **extra: Any,
    ) -> Dict[str, Any]:
        metadata = EnvelopeMetadata(
            timestamp=_utc_timestamp(),
            source=source,
            addonCount=len(self.aggregator.registry.list_enabled()),
            error=error,
            **{count_field: _count(data)},
            **extra,
        )
        return Envelope(success=success, data=data, metadata=metadata).to_dict()

    async def _resolve(
        self,
        primary: Callable[[], Awaitable[Any]],
        fallback: Callable[[], Any],
        count_field: str,
        **extra: Any,
    ) -> Dict[str, Any]:
        try:
            data = await primary()
        except Exception as exc:
            logger.error("Aggregator failed, serving fallback data: %s", exc, exc_info=True)
            return self.envelope(
                fallback(), SOURCE_MOCK_FALLBACK_ERROR, count_field, error=str(exc), **extra
            )

        if data:
            return self.envelope(data, SOURCE_ADDONS, count_field, **extra)

        logger.warning("No data from addons, using fallback data")
        return self.envelope(fallback(), SOURCE_MOCK_FALLBACK, count_field, **extra)

    async def discover(
        self,
        media_type: str,
        category: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Catalog by type and category"""
        async def primary():
            return (await self.aggregator.get_catalog(media_type, category, extra))["metas"]

        return await self._resolve(
            primary,
            lambda: self.fallback.mock_catalog(media_type, category),
            "itemCount",
            type=media_type,
            category=category,
        )

    async def search(self, query: str, media_type: Optional[str] = None) -> Dict[str, Any]:
        """Unified search across search-capable addon catalogs"""
        async def primary():
            return (await self.aggregator.search(query, media_type))["metas"]

        return await self._resolve(
            primary,
            lambda: self.fallback.mock_search(query, media_type or "movie"),
            "resultCount",
            query=query,
            type=media_type or "movie",
        )

    async def streams(self, item_id: str, media_type: str = "movie") -> Dict[str, Any]:
        async def primary():
            return (await self.aggregator.get_streams(media_type, item_id))["streams"]

        return await self._resolve(
            primary,
            lambda: self.fallback.mock_streams(media_type, item_id),
            "itemCount",
            id=item_id,
            type=media_type,
        )

    async def meta(self, item_id: str, media_type: str = "movie") -> Dict[str, Any]:
        async def primary():
            return (await self.aggregator.get_meta(media_type, item_id))["meta"]

        def fallback():
            return self.fallback.mock_meta(media_type, item_id) or self.fallback.placeholder_meta(media_type, item_id)

        return await self._resolve(primary, fallback, "itemCount", id=item_id, type=media_type)
