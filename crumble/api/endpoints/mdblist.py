"""
MDbList Endpoints
Passthrough to MDbList using the caller's API key
"""
from typing import Any, Awaitable, Callable, Optional
from fastapi import APIRouter, Header, HTTPException, Path, Query
from crumble.core.exceptions import TransportError
from crumble.models.mdblist import ListItemRequest
from crumble.services.mdblist import MDBListClient
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/mdblist", tags=["mdblist"])


def require_api_key(api_key: Optional[str]) -> str:
    if not api_key:
        raise HTTPException(status_code=401, detail={"message": "MDbList API key required"})
    return api_key


async def forward(
    api_key: str,
    call: Callable[[MDBListClient], Awaitable[Any]],
    failure_message: str,
) -> Any:
    """Run one client call, mapping upstream failures to 502"""
    client = MDBListClient(api_key)
    try:
        return await call(client)
    except TransportError as exc:
        logger.error(f"{failure_message}: {exc.reason}")
        raise HTTPException(status_code=502, detail={"message": failure_message})
    finally:
        await client.close()


@router.get("")
async def mdblist_root():
    return {"message": "MDbList API route base"}


@router.get("/info/{id}")
async def item_info(
    id: str = Path(..., description="IMDB id"),
    x_mdblist_api_key: Optional[str] = Header(None),
):
    api_key = require_api_key(x_mdblist_api_key)
    return await forward(api_key, lambda client: client.get_info(id), "Failed to fetch item details")


@router.get("/search")
async def search_items(
    query: Optional[str] = Query(None, description="Search text"),
    x_mdblist_api_key: Optional[str] = Header(None),
):
    api_key = require_api_key(x_mdblist_api_key)
    if not query:
        raise HTTPException(status_code=400, detail={"message": "Search query is required"})

    return await forward(api_key, lambda client: client.search(query), "Failed to search items")


@router.get("/lists")
async def user_lists(x_mdblist_api_key: Optional[str] = Header(None)):
    """Lists of the user owning the API key"""
    api_key = require_api_key(x_mdblist_api_key)
    return await forward(api_key, lambda client: client.get_lists(), "Failed to fetch user lists")


@router.get("/list/{id}")
async def list_items(
    id: str = Path(..., description="MDbList list id"),
    x_mdblist_api_key: Optional[str] = Header(None),
):
    api_key = require_api_key(x_mdblist_api_key)
    return await forward(api_key, lambda client: client.get_list_items(id), "Failed to fetch list items")


@router.post("/list/{id}/add")
async def add_list_item(
    request: ListItemRequest,
    id: str = Path(..., description="MDbList list id"),
    x_mdblist_api_key: Optional[str] = Header(None),
):
    api_key = require_api_key(x_mdblist_api_key)
    if not request.itemId:
        raise HTTPException(status_code=400, detail={"message": "Item ID is required"})

    return await forward(
        api_key, lambda client: client.add_to_list(id, request.itemId), "Failed to add item to list"
    )


@router.delete("/list/{id}/remove/{item_id}")
async def remove_list_item(
    id: str = Path(..., description="MDbList list id"),
    item_id: str = Path(..., description="IMDB id of the item to remove"),
    x_mdblist_api_key: Optional[str] = Header(None),
):
    api_key = require_api_key(x_mdblist_api_key)
    return await forward(
        api_key, lambda client: client.remove_from_list(id, item_id), "Failed to remove item from list"
    )
