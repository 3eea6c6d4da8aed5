"""
Response Envelope Models
Uniform envelope returned by every frontend read endpoint
"""
from pydantic import BaseModel, ConfigDict
from typing import Any, Optional

SOURCE_ADDONS = "addons"
SOURCE_MOCK_FALLBACK = "mock_fallback"
SOURCE_MOCK_FALLBACK_ERROR = "mock_fallback_error"


class EnvelopeMetadata(BaseModel):
    """Provenance and bookkeeping for an envelope; endpoint-specific keys allowed"""
    model_config = ConfigDict(extra="allow")

    timestamp: str
    source: str
    itemCount: Optional[int] = None
    resultCount: Optional[int] = None
    addonCount: int = 0
    error: Optional[str] = None


class Envelope(BaseModel):
    success: bool
    data: Any = None
    metadata: EnvelopeMetadata

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "data": self.data,
            "metadata": self.metadata.model_dump(exclude_none=True),
        }
