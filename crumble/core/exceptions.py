"""
Domain Exceptions
Errors raised by the addon loader, registry and aggregator
"""
from typing import List, Optional


class CrumbleError(Exception):
    """Base class for all application errors"""


class TransportError(CrumbleError):
    """Outbound HTTP call failed (network, timeout, non-2xx or non-JSON body)"""

    def __init__(self, url: str, reason: str, status: Optional[int] = None, timeout: bool = False):
        self.url = url
        self.reason = reason
        self.status = status
        self.timeout = timeout
        super().__init__(f"GET {url} failed: {reason}")


class ManifestFetchError(CrumbleError):
    """Network error, timeout or non-2xx response while fetching a manifest"""

    def __init__(self, url: str, reason: str, status: Optional[int] = None, timeout: bool = False):
        self.url = url
        self.reason = reason
        self.status = status
        self.timeout = timeout
        super().__init__(f"Failed to fetch manifest from {url}: {reason}")


class ManifestInvalidError(CrumbleError):
    """Manifest document is missing required fields"""

    def __init__(self, url: str, errors: List[str]):
        self.url = url
        self.errors = errors
        super().__init__(f"Invalid manifest at {url}: {'; '.join(errors)}")


class AddonCallError(CrumbleError):
    """Failure while querying an already registered addon"""

    def __init__(self, addon_id: str, url: str, reason: str):
        self.addon_id = addon_id
        self.url = url
        self.reason = reason
        super().__init__(f"Addon {addon_id} request to {url} failed: {reason}")


class AddonNotFoundError(CrumbleError):
    """Operation on an addon id that is not registered"""

    def __init__(self, addon_id: str):
        self.addon_id = addon_id
        super().__init__(f"Addon not found: {addon_id}")


class AddonDisabledError(CrumbleError):
    """Query aimed at an addon that is registered but disabled"""

    def __init__(self, addon_id: str):
        self.addon_id = addon_id
        super().__init__(f"Addon is disabled: {addon_id}")
