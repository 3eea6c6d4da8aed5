"""
Addon Transport
Async HTTP client for the Stremio addon transport convention
"""
import aiohttp
import asyncio
import logging
from typing import Any, Dict, Optional
from crumble.core.config import settings
from crumble.core.exceptions import TransportError

logger = logging.getLogger(__name__)


class AddonTransport:
    """Shared aiohttp session issuing bounded-time JSON GETs"""

    def __init__(self, timeout: Optional[float] = None, user_agent: Optional[str] = None):
        self.timeout = timeout if timeout is not None else settings.ADDON_REQUEST_TIMEOUT
        self.user_agent = user_agent or settings.ADDON_USER_AGENT
        self.session: Optional[aiohttp.ClientSession] = None

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session"""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": self.user_agent},
            )
        return self.session

    async def close(self):
        """Close aiohttp session"""
        if self.session and not self.session.closed:
            await self.session.close()

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a JSON document

        Args:
            url: Absolute URL
            params: Query parameters; None values are dropped

        Returns:
            Decoded JSON body

        Raises:
            TransportError: on network error, timeout, non-2xx status or a body that is not JSON
        """
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        session = await self.get_session()
        try:
            async with session.get(url, params=query or None, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(url, f"HTTP {response.status}", status=response.status)
                try:
                    return await response.json(content_type=None)
                except ValueError as exc:
                    raise TransportError(url, f"invalid JSON body: {exc}", status=response.status)
        except asyncio.TimeoutError:
            raise TransportError(url, f"timed out after {self.timeout}s", timeout=True)
        except aiohttp.ClientError as exc:
            raise TransportError(url, str(exc) or exc.__class__.__name__)
