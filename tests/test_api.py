"""
Tests for API endpoints
"""
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, patch
from httpx import ASGITransport, AsyncClient
from conftest import FakeTransport, make_descriptor, manifest_doc
from crumble.core.app import create_app
from crumble.core.exceptions import TransportError
from crumble.services.mdblist import MDBListClient


@pytest.fixture
def addon_transport():
    return FakeTransport()


@pytest.fixture
def app(addon_transport):
    return create_app(transport=addon_transport, seeds=[])


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_health_check(client):
    """Test health check endpoint"""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["addons"] == {"registered": 0, "enabled": 0}
    assert "cache" not in data

    response = await client.get("/api/health", params={"include_cache": "true"})
    assert response.json()["cache"]["size"] == 0


@pytest.mark.asyncio
async def test_manifest_endpoint(client):
    """Test manifest endpoint returns the addon manifest"""
    response = await client.get("/manifest.json")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "crmb.addon"
    assert "catalog" in data["resources"]
    assert len(data["catalogs"]) == 2


@pytest.mark.asyncio
async def test_add_list_and_remove_addon(client, addon_transport):
    addon_transport.routes["https://cinemeta.example.com/manifest.json"] = manifest_doc("cinemeta")

    response = await client.post("/api/addons", json={"url": "https://cinemeta.example.com/manifest.json"})
    assert response.status_code == 201
    assert response.json()["addon"]["id"] == "cinemeta"

    listing = (await client.get("/api/addons")).json()
    assert listing["count"] == 1
    assert listing["addons"][0]["transport_url"] == "https://cinemeta.example.com"

    available = (await client.get("/api/addons/available")).json()
    assert available["addons"][0]["loaded"] is True

    response = await client.delete("/api/addons/cinemeta")
    assert response.status_code == 200
    assert (await client.get("/api/addons")).json()["count"] == 0


@pytest.mark.asyncio
async def test_add_addon_error_statuses(client, addon_transport):
    doc = manifest_doc("broken")
    del doc["types"]
    addon_transport.routes["https://broken.example.com/manifest.json"] = doc
    addon_transport.routes["https://slow.example.com/manifest.json"] = TransportError(
        "https://slow.example.com/manifest.json", "timed out", timeout=True
    )

    invalid = await client.post("/api/addons", json={"url": "https://broken.example.com"})
    unreachable = await client.post("/api/addons", json={"url": "https://gone.example.com"})
    timed_out = await client.post("/api/addons", json={"url": "https://slow.example.com"})
    empty = await client.post("/api/addons", json={"url": ""})

    assert invalid.status_code == 422
    assert invalid.json()["detail"]["errors"] == ["Missing required field: types"]
    assert unreachable.status_code == 502
    assert timed_out.status_code == 504
    assert empty.status_code == 422
    assert (await client.get("/api/addons")).json()["count"] == 0


@pytest.mark.asyncio
async def test_toggle_and_remove_unknown_addon(client, app):
    app.state.registry.register(make_descriptor("one"))

    response = await client.patch("/api/addons/one", json={"enabled": False})
    assert response.status_code == 200
    assert response.json()["addon"]["enabled"] is False

    assert (await client.patch("/api/addons/missing", json={"enabled": True})).status_code == 404
    assert (await client.delete("/api/addons/missing")).status_code == 404


@pytest.mark.asyncio
async def test_clear_cache(client, app):
    await client.get("/api/content/discover/movie/top")

    response = await client.post("/api/addons/cache/clear")

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(app.state.cache) == 0


@pytest.mark.asyncio
async def test_validate_manifest_endpoint(client, addon_transport):
    addon_transport.routes["https://ok.example.com/manifest.json"] = manifest_doc("ok")

    response = await client.get("/api/manifest/validate", params={"url": "https://ok.example.com"})
    assert response.status_code == 200
    validation = response.json()["validation"]
    assert validation["valid"] is True
    assert validation["errors"] == []

    missing = await client.get("/api/manifest/validate", params={"url": "https://gone.example.com"})
    assert missing.status_code == 502


@pytest.mark.asyncio
async def test_proxy_manifest_endpoint(client, addon_transport):
    addon_transport.routes["https://ok.example.com/manifest.json"] = manifest_doc("ok")

    response = await client.get("/api/manifest/proxy", params={"url": "ok.example.com/manifest.json"})

    assert response.status_code == 200
    assert response.json()["id"] == "ok"
    assert (await client.get("/api/manifest/proxy")).status_code == 422


@pytest.mark.asyncio
async def test_discover_with_addons(client, app, addon_transport):
    app.state.registry.register(make_descriptor("one"))
    addon_transport.routes["https://one.example.com/catalog/movie/top.json"] = {
        "metas": [{"id": "tt1", "name": "A"}]
    }

    response = await client.get("/api/content/discover/movie/trending", params={"genre": "Drama"})

    data = response.json()
    assert response.status_code == 200
    assert data["success"] is True
    assert data["metadata"]["source"] == "addons"
    assert data["data"] == [{"id": "tt1", "name": "A", "type": "movie"}]
    assert addon_transport.calls[-1][1] == {"genre": "Drama"}


@pytest.mark.asyncio
async def test_discover_without_addons_falls_back(client):
    response = await client.get("/api/content/discover/series/top")

    data = response.json()
    assert data["success"] is True
    assert data["metadata"]["source"] == "mock_fallback"
    assert data["metadata"]["addonCount"] == 0
    assert data["data"][0]["name"] == "Game of Thrones"


@pytest.mark.asyncio
async def test_search_stream_and_meta_endpoints(client):
    search = (await client.get("/api/content/search/inception")).json()
    streams = (await client.get("/api/content/stream/tt1375666", params={"type": "movie"})).json()
    meta = (await client.get("/api/content/meta/tt1375666")).json()

    assert search["metadata"]["resultCount"] == 1
    assert search["data"][0]["id"] == "tt1375666"
    assert len(streams["data"]) == 2
    assert meta["data"]["name"] == "Inception"


@pytest.mark.asyncio
async def test_direct_addon_query(client, app, addon_transport):
    app.state.registry.register(make_descriptor("one"))
    addon_transport.routes["https://one.example.com/stream/movie/tt1.json"] = {
        "streams": [{"name": "Direct", "url": "https://cdn.example.com/1.mp4"}]
    }

    ok = await client.get("/api/content/addon/one/stream/tt1")
    failed = await client.get("/api/content/addon/one/meta/tt1")
    unknown = await client.get("/api/content/addon/missing/stream/tt1")
    bad_resource = await client.get("/api/content/addon/one/posters/tt1")

    assert ok.status_code == 200
    assert ok.json()["data"][0]["name"] == "Direct"
    assert ok.json()["metadata"]["source"] == "specific_addon"
    assert failed.status_code == 502
    assert failed.json()["success"] is False
    assert "error" in failed.json()["metadata"]
    assert unknown.status_code == 404
    assert bad_resource.status_code == 400


@pytest.mark.asyncio
async def test_content_and_addon_health(client, app):
    app.state.registry.register(make_descriptor("one"))

    content = (await client.get("/api/content/health")).json()
    addons = (await client.get("/api/addons/health")).json()

    assert content["data"]["total"] == 1
    assert addons["health"]["streamSupport"] == 1


@pytest.mark.asyncio
async def test_stremio_catalog_falls_back(client):
    """Test catalog endpoint"""
    response = await client.get("/catalog/movie/top.json")

    assert response.status_code == 200
    data = response.json()
    assert len(data["metas"]) == 20
    assert data["metas"][0]["id"] == "tt0111161"


@pytest.mark.asyncio
async def test_stremio_meta_and_stream(client, app, addon_transport):
    app.state.registry.register(make_descriptor("one"))
    addon_transport.routes["https://one.example.com/stream/movie/tt1.json"] = {
        "streams": [{"name": "Real", "url": "https://cdn.example.com/1.mp4"}]
    }

    meta = (await client.get("/meta/movie/tt404.json")).json()
    streams = (await client.get("/stream/movie/tt1.json")).json()

    assert meta["meta"]["id"] == "tt404"
    assert streams["streams"] == [{"name": "Real", "url": "https://cdn.example.com/1.mp4"}]


@pytest.mark.asyncio
async def test_mdblist_requires_key(client):
    assert (await client.get("/api/mdblist/info/tt0133093")).status_code == 401
    response = await client.get("/api/mdblist/search", headers={"X-MDbList-API-Key": "key"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_mdblist_passthrough(client):
    with patch.object(MDBListClient, "get_info", new_callable=AsyncMock) as mock_info:
        mock_info.return_value = {"title": "The Matrix"}
        response = await client.get("/api/mdblist/info/tt0133093", headers={"X-MDbList-API-Key": "key"})

    assert response.status_code == 200
    assert response.json() == {"title": "The Matrix"}

    with patch.object(MDBListClient, "search", new_callable=AsyncMock) as mock_search:
        mock_search.side_effect = TransportError("https://mdblist.com/api/", "HTTP 500", status=500)
        response = await client.get(
            "/api/mdblist/search", params={"query": "matrix"}, headers={"X-MDbList-API-Key": "key"}
        )

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_direct_addon_query_on_disabled_addon(client, app, addon_transport):
    app.state.registry.register(make_descriptor("one", enabled=False))
    addon_transport.routes["https://one.example.com/stream/movie/tt1.json"] = {"streams": []}

    response = await client.get("/api/content/addon/one/stream/tt1")

    assert response.status_code == 409
    assert response.json()["detail"]["message"] == "Addon is disabled"
    assert addon_transport.calls_to("https://one.example.com") == 0


@pytest.mark.asyncio
async def test_mdblist_lists_routes(client):
    headers = {"X-MDbList-API-Key": "key"}
    assert (await client.get("/api/mdblist/lists")).status_code == 401

    with patch.object(MDBListClient, "get_lists", new_callable=AsyncMock) as mock_lists:
        mock_lists.return_value = [{"id": 42, "name": "Watchlist"}]
        response = await client.get("/api/mdblist/lists", headers=headers)

    assert response.status_code == 200
    assert response.json() == [{"id": 42, "name": "Watchlist"}]

    with patch.object(MDBListClient, "get_list_items", new_callable=AsyncMock) as mock_items:
        mock_items.return_value = [{"imdb_id": "tt0133093"}]
        response = await client.get("/api/mdblist/list/42", headers=headers)

    assert response.json() == [{"imdb_id": "tt0133093"}]
    mock_items.assert_called_once_with("42")


@pytest.mark.asyncio
async def test_mdblist_add_and_remove_list_item(client):
    headers = {"X-MDbList-API-Key": "key"}

    missing = await client.post("/api/mdblist/list/42/add", json={}, headers=headers)
    assert missing.status_code == 400
    assert missing.json()["detail"]["message"] == "Item ID is required"

    with patch.object(MDBListClient, "add_to_list", new_callable=AsyncMock) as mock_add:
        mock_add.return_value = {"success": True}
        added = await client.post("/api/mdblist/list/42/add", json={"itemId": "tt1"}, headers=headers)

    assert added.status_code == 200
    mock_add.assert_called_once_with("42", "tt1")

    with patch.object(MDBListClient, "remove_from_list", new_callable=AsyncMock) as mock_remove:
        mock_remove.side_effect = TransportError("https://mdblist.com/api/lists/remove", "HTTP 500", status=500)
        removed = await client.delete("/api/mdblist/list/42/remove/tt1", headers=headers)

    assert removed.status_code == 502
    assert removed.json()["detail"]["message"] == "Failed to remove item from list"
