"""
Test configuration and fixtures
"""
import asyncio
import pytest
from typing import Any, Callable, Dict, List, Optional, Tuple
from crumble.core.exceptions import TransportError
from crumble.models.addon import AddonCatalog, AddonDescriptor
from crumble.services.aggregator import AddonAggregator
from crumble.services.cache import AddonCache
from crumble.services.fallback import FallbackProvider
from crumble.services.loader import AddonLoader
from crumble.services.normalizer import ResponseNormalizer
from crumble.services.registry import AddonRegistry


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeTransport:
    """
    Stand-in for AddonTransport

    Routes map a URL to a JSON value, an exception instance to raise, or an
    async callable taking the query params. Unknown URLs answer like a 404.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[Tuple[str, Optional[Dict[str, Any]]]] = []
        self.closed = False

    def calls_to(self, prefix: str) -> int:
        return sum(1 for url, _ in self.calls if url.startswith(prefix))

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((url, params))
        if url not in self.routes:
            raise TransportError(url, "HTTP 404", status=404)
        route = self.routes[url]
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return await route(params)
        return route

    async def close(self):
        self.closed = True


def slow_response(payload: Any, delay: float) -> Callable:
    async def handler(params):
        await asyncio.sleep(delay)
        return payload
    return handler


def manifest_doc(
    addon_id: str,
    resources: Optional[List[Any]] = None,
    types: Optional[List[str]] = None,
    catalogs: Optional[List[Dict[str, Any]]] = None,
    **fields: Any,
) -> Dict[str, Any]:
    doc = {
        "id": addon_id,
        "name": f"Addon {addon_id}",
        "version": "1.0.0",
        "description": f"Test addon {addon_id}",
        "resources": resources if resources is not None else ["catalog", "meta", "stream"],
        "types": types if types is not None else ["movie", "series"],
        "catalogs": catalogs if catalogs is not None else [{"type": "movie", "id": "top", "name": "Top"}],
        "idPrefixes": ["tt"],
    }
    doc.update(fields)
    return doc


def make_descriptor(
    addon_id: str,
    resources: Optional[List[str]] = None,
    types: Optional[List[str]] = None,
    catalogs: Optional[List[Tuple[str, str]]] = None,
    search: bool = False,
    enabled: bool = True,
) -> AddonDescriptor:
    catalog_pairs = catalogs if catalogs is not None else [("movie", "top")]
    return AddonDescriptor(
        id=addon_id,
        name=f"Addon {addon_id}",
        transport_url=f"https://{addon_id}.example.com",
        resources=resources if resources is not None else ["catalog", "meta", "stream", "subtitles"],
        types=types if types is not None else ["movie", "series"],
        catalogs=[
            AddonCatalog(type=t, id=i, name=i, extra_params=["search"] if search else ["skip", "genre"])
            for t, i in catalog_pairs
        ],
        enabled=enabled,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return AddonCache(ttl=1800, clock=clock)


@pytest.fixture
def registry(cache):
    return AddonRegistry(cache)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def loader(registry, transport):
    return AddonLoader(registry, transport)


@pytest.fixture
def aggregator(registry, cache, transport):
    return AddonAggregator(registry, cache, transport, call_timeout=0.5)


@pytest.fixture
def fallback():
    return FallbackProvider(default_count=20)


@pytest.fixture
def normalizer(aggregator, fallback):
    return ResponseNormalizer(aggregator, fallback)


@pytest.fixture
def sample_metas():
    """Catalog payloads of two overlapping addons"""
    return {
        "one": [{"id": "tt1", "name": "A"}],
        "two": [{"id": "tt1", "name": "A-duplicate"}, {"id": "tt2", "name": "B"}],
    }
