"""
Stremio Protocol Models
Pydantic models for Stremio addon protocol
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional, Union


class ManifestCatalog(BaseModel):
    """Catalog definition in manifest"""
    type: str
    id: str
    name: str
    extra: List[dict] = Field(default_factory=list)


class Manifest(BaseModel):
    """Manifest of the BFF's own addon surface"""
    id: str = "crmb.addon"
    version: str = "1.0.0"
    name: str = "CRMB Addon"
    description: str = "Content discovery and streaming addon for CRMB"

    resources: List[str] = ["catalog", "meta", "stream"]
    types: List[str] = ["movie", "series"]
    idPrefixes: List[str] = ["tt"]

    catalogs: List[ManifestCatalog] = [
        ManifestCatalog(type="movie", id="top", name="Top Movies", extra=[{"name": "skip"}, {"name": "genre"}]),
        ManifestCatalog(type="series", id="top", name="Top Series", extra=[{"name": "skip"}, {"name": "genre"}]),
    ]

    behaviorHints: dict = {
        "configurable": True,
        "configurationRequired": False,
    }


class MetaItem(BaseModel):
    """Catalog item / meta record; unknown addon fields are kept"""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    type: Optional[str] = None
    name: Optional[str] = None
    poster: Optional[str] = None
    background: Optional[str] = None
    logo: Optional[str] = None
    description: Optional[str] = None
    releaseInfo: Optional[str] = None
    year: Optional[Union[int, str]] = None
    imdbRating: Optional[Union[float, str]] = None
    genres: Optional[List[str]] = None
    runtime: Optional[str] = None
    cast: Optional[List[str]] = None
    director: Optional[List[str]] = None
    trailers: Optional[List[Any]] = None

    @field_validator("genres", "cast", "director", mode="before")
    @classmethod
    def coerce_name_list(cls, value: Any) -> Any:
        # Bare names and {name: ...} entries are flattened into a list of names
        if value is None:
            return None
        if isinstance(value, (str, int, float)):
            value = [value]
        if not isinstance(value, list):
            return value
        names = []
        for entry in value:
            if isinstance(entry, dict):
                entry = entry.get("name")
            if entry is not None and str(entry).strip():
                names.append(str(entry).strip())
        return names


class StreamItem(BaseModel):
    """Stream descriptor; never deduplicated"""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    name: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None


class SubtitleItem(BaseModel):
    """Subtitle track"""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = None
    url: str
    lang: Optional[str] = None


class CatalogResponse(BaseModel):
    """Catalog endpoint response"""
    metas: List[MetaItem]


class MetaResponse(BaseModel):
    """Meta endpoint response"""
    meta: Optional[MetaItem] = None


class StreamResponse(BaseModel):
    """Stream endpoint response"""
    streams: List[StreamItem]
