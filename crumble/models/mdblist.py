"""
MDbList Models
Request bodies of the MDbList passthrough
"""
from pydantic import BaseModel, Field
from typing import Optional


class ListItemRequest(BaseModel):
    """Body of POST /api/mdblist/list/{id}/add"""
    itemId: Optional[str] = Field(None, description="IMDB id of the item to add")
