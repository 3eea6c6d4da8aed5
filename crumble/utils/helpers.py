"""
Helper Utilities
General purpose utility functions
"""
import hashlib
from typing import Any, Dict, List, Tuple
from urllib.parse import urlsplit

MANIFEST_SUFFIX = "/manifest.json"

# Frontend catalog names -> ids that common addons actually declare
CATALOG_ID_ALIASES = {
    "trending": "top",
    "popular": "top",
    "new": "year",
    "featured": "imdbRating",
}


def deduplicate_by_key(
    items: List[Dict[str, Any]],
    key: str = "id"
) -> List[Dict[str, Any]]:
    """
    Remove duplicate items, keeping the first occurrence

    Args:
        items: List of items
        key: Key to use for deduplication

    Returns:
        Deduplicated list maintaining original order
    """
    seen = set()
    result = []

    for item in items:
        item_key = item.get(key)
        if item_key and item_key not in seen:
            seen.add(item_key)
            result.append(item)

    return result


def normalize_addon_url(url: str) -> Tuple[str, str]:
    """
    Split a user-supplied addon URL into (transport base URL, manifest URL)

    Accepts either the transport base or the manifest document URL and
    assumes https when no scheme is given.

    Raises:
        ValueError: if the URL has no host
    """
    cleaned = (url or "").strip()
    if not cleaned.startswith(("http://", "https://")):
        cleaned = f"https://{cleaned}"
    if not urlsplit(cleaned).netloc:
        raise ValueError(f"Invalid URL format: {url!r}")

    cleaned = cleaned.rstrip("/")
    if cleaned.endswith(MANIFEST_SUFFIX):
        base = cleaned[: -len(MANIFEST_SUFFIX)]
    else:
        base = cleaned
    return base, f"{base}{MANIFEST_SUFFIX}"


def derive_addon_id(base_url: str) -> str:
    """Stable id for manifests that do not declare one"""
    digest = hashlib.sha1(base_url.encode("utf-8")).hexdigest()[:12]
    host = urlsplit(base_url).netloc or "addon"
    return f"{host}.{digest}"


def map_catalog_id(requested_id: str) -> str:
    return CATALOG_ID_ALIASES.get(requested_id, requested_id)


def is_truthy_flag(value: Any) -> bool:
    """Query-string style boolean: 1/true/yes/on"""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def sanitize_title(title: str) -> str:
    if not title:
        return ""

    return title.strip()[:200]  # Limit length
