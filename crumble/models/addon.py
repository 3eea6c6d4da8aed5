"""
Addon Models
Validated addon descriptors built from third-party manifests
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional

RESOURCES = ("catalog", "meta", "stream", "subtitles")


def _unique(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


class AddonCatalog(BaseModel):
    """Catalog declared by an addon manifest"""
    type: str
    id: str
    name: str = ""
    extra_params: List[str] = Field(default_factory=list)

    @property
    def supports_search(self) -> bool:
        return "search" in self.extra_params

    @classmethod
    def from_manifest_entry(cls, entry: Dict[str, Any]) -> "AddonCatalog":
        """
        Build a catalog from a manifest catalog entry

        Handles both the current `extra: [{name: ...}]` form and the legacy
        `extraSupported: [...]` list of names.
        """
        params = []
        for extra in entry.get("extra") or []:
            if isinstance(extra, dict) and extra.get("name"):
                params.append(str(extra["name"]))
            elif isinstance(extra, str):
                params.append(extra)
        params.extend(str(name) for name in entry.get("extraSupported") or [])
        return cls(
            type=str(entry.get("type", "")),
            id=str(entry.get("id", "")),
            name=str(entry.get("name") or ""),
            extra_params=_unique(params),
        )


class AddonDescriptor(BaseModel):
    """An addon known to the registry"""
    id: str
    name: str
    transport_url: str = Field(..., description="Base URL, without /manifest.json")
    description: str = ""
    version: Optional[str] = None
    resources: List[str] = Field(default_factory=list)
    types: List[str] = Field(default_factory=list)
    catalogs: List[AddonCatalog] = Field(default_factory=list)
    id_prefixes: List[str] = Field(default_factory=list)
    # Per-resource overrides from object-form manifest resources
    resource_types: Dict[str, List[str]] = Field(default_factory=dict)
    resource_id_prefixes: Dict[str, List[str]] = Field(default_factory=dict)
    enabled: bool = True

    @field_validator("resources", "types", "id_prefixes")
    @classmethod
    def dedupe(cls, values: List[str]) -> List[str]:
        return _unique(values)

    def types_for(self, resource: str) -> List[str]:
        return self.resource_types.get(resource) or self.types

    def id_prefixes_for(self, resource: str) -> List[str]:
        return self.resource_id_prefixes.get(resource) or self.id_prefixes

    def supports(self, resource: str, media_type: str, item_id: Optional[str] = None) -> bool:
        """
        Whether this addon serves `resource` for `media_type`

        When `item_id` is given and the addon declares id prefixes for the
        resource, the id must start with one of them. Catalog ids are never
        prefix-checked.
        """
        if resource not in self.resources or media_type not in self.types_for(resource):
            return False
        if item_id is None or resource == "catalog":
            return True
        prefixes = self.id_prefixes_for(resource)
        return not prefixes or any(item_id.startswith(prefix) for prefix in prefixes)

    def has_catalog(self, media_type: str, catalog_id: str) -> bool:
        return any(c.type == media_type and c.id == catalog_id for c in self.catalogs)

    def search_catalogs(self, media_type: Optional[str] = None) -> List[AddonCatalog]:
        return [
            c for c in self.catalogs
            if c.supports_search and (media_type is None or c.type == media_type)
        ]

    def resource_url(self, resource: str, media_type: str, item_id: str) -> str:
        return f"{self.transport_url}/{resource}/{media_type}/{item_id}.json"


class AddAddonRequest(BaseModel):
    """Body of POST /api/addons"""
    url: str = Field(..., min_length=1, description="Addon transport or manifest URL")


class AddonStatusRequest(BaseModel):
    """Body of PATCH /api/addons/{id}"""
    enabled: bool
