"""MDbList API Client
Passthrough client; the API key comes from each frontend request
"""
import aiohttp
import asyncio
import logging
from typing import Any, Dict, Optional
from crumble.core.config import settings
from crumble.core.exceptions import TransportError
from crumble.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class MDBListClient:
    """Async client for MDbList item lookups and search"""

    def __init__(self, api_key: str, base_url: Optional[str] = None):
        self.api_key = api_key
        self.base_url = base_url or settings.MDBLIST_API_URL
        self.session: Optional[aiohttp.ClientSession] = None
        rate = 0 if settings.DISABLE_RATE_LIMITING else settings.MDBLIST_RATE_LIMIT
        self.rate_limiter = RateLimiter.for_service("mdblist", rate)

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session"""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=10)
            )
        return self.session

    async def close(self):
        """Close aiohttp session"""
        if self.session and not self.session.closed:
            await self.session.close()

    async def _request(self, params: Dict[str, Any], path: str = "") -> Any:
        """
        Call the MDbList API

        Args:
            params: Query parameters besides the API key
            path: Endpoint below the API root, e.g. "lists/items"

        Raises:
            TransportError: on network error, timeout or non-200 status
        """
        await self.rate_limiter.acquire()
        url = f"{self.base_url.rstrip('/')}/{path}" if path else self.base_url
        request_params = {"apikey": self.api_key}
        request_params.update(params)

        try:
            session = await self.get_session()
            async with session.get(url, params=request_params) as response:
                if response.status != 200:
                    logger.warning("MDbList API error: %s for %s params=%s", response.status, path or "/", list(params))
                    raise TransportError(url, f"HTTP {response.status}", status=response.status)
                return await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise TransportError(url, "timeout", timeout=True)
        except (aiohttp.ClientError, ValueError) as exc:
            raise TransportError(url, str(exc))

    async def get_info(self, imdb_id: str) -> Any:
        """
        Item details for an IMDB ID

        Args:
            imdb_id: IMDB ID (e.g., "tt1234567")
        """
        return await self._request({"i": imdb_id})

    async def search(self, query: str) -> Any:
        """Free-text title search"""
        return await self._request({"s": query})

    async def get_lists(self) -> Any:
        """Lists owned by the API key's user"""
        return await self._request({}, "lists")

    async def get_list_items(self, list_id: str) -> Any:
        return await self._request({"list": list_id}, "lists/items")

    async def add_to_list(self, list_id: str, item_id: str) -> Any:
        """Add an item to one of the user's lists"""
        return await self._request({"list": list_id, "i": item_id}, "lists/add")

    async def remove_from_list(self, list_id: str, item_id: str) -> Any:
        return await self._request({"list": list_id, "i": item_id}, "lists/remove")
