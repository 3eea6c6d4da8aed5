"""
In-Memory Cache
TTL cache for aggregated addon responses
"""
import copy
import logging
import time
from typing import Any, Callable, Dict, FrozenSet, Iterable, NamedTuple, Optional, Tuple

from crumble.core.config import settings

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    """Structured cache key; identical logical requests always compare equal"""
    operation: str
    type: str
    id: str
    extra: Tuple[Tuple[str, str], ...] = ()
    addon_id: Optional[str] = None

    @classmethod
    def build(
        cls,
        operation: str,
        media_type: str,
        item_id: str,
        extra: Optional[Dict[str, Any]] = None,
        addon_id: Optional[str] = None,
    ) -> "CacheKey":
        normalized = tuple(sorted((str(k), str(v)) for k, v in (extra or {}).items()))
        return cls(operation, media_type, item_id, normalized, addon_id)

    def __str__(self) -> str:
        extra = "&".join(f"{k}={v}" for k, v in self.extra)
        base = f"{self.operation}:{self.type}:{self.id}:{extra}"
        if self.addon_id:
            return f"addon:{self.addon_id}:{base}"
        return base


class CacheEntry(NamedTuple):
    value: Any
    stored_at: float
    sources: FrozenSet[str]


class AddonCache:
    """
    Process-wide key -> (timestamp, value) store with a fixed TTL.

    Expired entries are only purged when they are looked up. Each entry
    remembers which addons contributed to it so removing or disabling an
    addon can drop everything it fed.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = float(ttl if ttl is not None else settings.CACHE_TTL_ADDONS)
        self.clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._metrics: Dict[str, int] = {
            "hits": 0,
            "misses": 0,
            "expired": 0,
            "writes": 0,
            "invalidated": 0,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def _bump(self, metric: str, amount: int = 1):
        self._metrics[metric] = self._metrics.get(metric, 0) + amount

    def metrics_snapshot(self) -> Dict[str, int]:
        """Return a shallow copy of the counters plus the current size."""
        snapshot = dict(self._metrics)
        snapshot["size"] = len(self._entries)
        return snapshot

    def get(self, key: CacheKey) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value, or None if missing or older than the TTL
        """
        entry = self._entries.get(key)
        if entry is None:
            self._bump("misses")
            logger.debug("Cache miss: %s", key)
            return None

        age = self.clock() - entry.stored_at
        if age >= self.ttl:
            del self._entries[key]
            self._bump("expired")
            self._bump("misses")
            logger.debug("Cache expired: %s (age: %.1fs)", key, age)
            return None

        self._bump("hits")
        logger.debug("Cache hit: %s (age: %.1fs)", key, age)
        return copy.deepcopy(entry.value)

    def set(self, key: CacheKey, value: Any, sources: Iterable[str] = ()):
        """
        Set value in cache, overwriting any previous entry

        Args:
            key: Cache key
            value: Value to cache
            sources: Ids of the addons whose data is part of the value
        """
        self._entries[key] = CacheEntry(value, self.clock(), frozenset(sources))
        self._bump("writes")

    def invalidate(
        self,
        key: Optional[CacheKey] = None,
        prefix: Optional[str] = None,
        predicate: Optional[Callable[[CacheKey], bool]] = None,
        addon_id: Optional[str] = None,
    ) -> int:
        """
        Remove matching entries

        Args:
            key: Exact key to drop
            prefix: Drop keys whose string form starts with this prefix
            predicate: Drop keys for which this returns True
            addon_id: Drop keys scoped to this addon and entries it contributed to

        Returns:
            Number of removed entries
        """
        doomed = []
        for entry_key, entry in self._entries.items():
            if key is not None and entry_key == key:
                doomed.append(entry_key)
            elif prefix is not None and str(entry_key).startswith(prefix):
                doomed.append(entry_key)
            elif predicate is not None and predicate(entry_key):
                doomed.append(entry_key)
            elif addon_id is not None and (entry_key.addon_id == addon_id or addon_id in entry.sources):
                doomed.append(entry_key)

        for entry_key in doomed:
            del self._entries[entry_key]

        if doomed:
            self._bump("invalidated", len(doomed))
            logger.debug("Invalidated %d cache entries", len(doomed))
        return len(doomed)

    def clear(self) -> int:
        """Drop every entry; returns how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("Addon cache cleared (%d entries)", count)
        return count
