"""
Tests for addon management operations
"""
import pytest
from conftest import manifest_doc
from crumble.core.config import AddonSeed
from crumble.core.exceptions import AddonNotFoundError, ManifestInvalidError
from crumble.services.addons import AddonManager
from crumble.services.cache import CacheKey


@pytest.fixture
def seeds():
    return [
        AddonSeed(url="https://cinemeta.example.com/manifest.json", name="Cinemeta"),
        AddonSeed(url="https://opensubs.example.com", id="opensubs", enabled=False),
    ]


@pytest.fixture
def manager(registry, loader, cache, transport, seeds):
    transport.routes["https://cinemeta.example.com/manifest.json"] = manifest_doc("cinemeta")
    transport.routes["https://opensubs.example.com/manifest.json"] = manifest_doc(
        "opensubs", resources=["subtitles"]
    )
    return AddonManager(registry, loader, cache, seeds)


@pytest.mark.asyncio
async def test_initialize_loads_enabled_seeds_and_clears_cache(manager, registry, cache):
    cache.set(CacheKey.build("catalog", "movie", "top"), {"metas": []})

    loaded, failed = await manager.initialize()

    assert (loaded, failed) == (1, 0)
    assert [d.id for d in registry.list()] == ["cinemeta"]
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_initialize_does_not_mutate_configured_seeds(manager, seeds):
    await manager.initialize()

    assert seeds[0].id is None
    assert manager.available[0].id == "cinemeta"


@pytest.mark.asyncio
async def test_list_available_reports_load_state(manager):
    await manager.initialize()

    available = manager.list_available()

    assert available[0]["id"] == "cinemeta"
    assert available[0]["loaded"] is True
    assert available[0]["resources"] == ["catalog", "meta", "stream"]
    assert available[1]["id"] == "opensubs"
    assert available[1]["loaded"] is False
    assert available[1]["enabled"] is False


@pytest.mark.asyncio
async def test_add_registers_and_remembers(manager, registry, transport):
    transport.routes["https://new.example.com/manifest.json"] = manifest_doc("new")

    descriptor = await manager.add("https://new.example.com")

    assert descriptor.id == "new"
    assert "new" in registry
    assert manager.available[-1].id == "new"
    assert manager.available[-1].url == "https://new.example.com"


@pytest.mark.asyncio
async def test_add_invalid_manifest_propagates(manager, registry, transport):
    doc = manifest_doc("bad")
    del doc["name"]
    transport.routes["https://bad.example.com/manifest.json"] = doc

    with pytest.raises(ManifestInvalidError):
        await manager.add("https://bad.example.com")
    assert "bad" not in registry
    assert all(seed.id != "bad" for seed in manager.available)


@pytest.mark.asyncio
async def test_remove_forgets_addon(manager, registry):
    await manager.initialize()

    removed = manager.remove("cinemeta")

    assert removed.id == "cinemeta"
    assert len(registry) == 0
    assert [seed.id for seed in manager.available] == ["opensubs"]


def test_remove_unknown_raises(manager):
    with pytest.raises(AddonNotFoundError):
        manager.remove("missing")


@pytest.mark.asyncio
async def test_enable_unloaded_seed_loads_it(manager, registry, transport):
    await manager.initialize()

    descriptor = await manager.set_enabled("opensubs", True)

    assert descriptor.id == "opensubs"
    assert "opensubs" in registry
    assert manager.available[1].enabled is True
    assert transport.calls_to("https://opensubs.example.com") == 1


@pytest.mark.asyncio
async def test_disable_unloaded_seed_returns_none(manager):
    assert await manager.set_enabled("opensubs", False) is None


@pytest.mark.asyncio
async def test_disable_loaded_addon(manager, registry):
    await manager.initialize()

    descriptor = await manager.set_enabled("cinemeta", False)

    assert descriptor.enabled is False
    assert registry.list_enabled() == []
    assert manager.available[0].enabled is False


@pytest.mark.asyncio
async def test_set_enabled_unknown_raises(manager):
    with pytest.raises(AddonNotFoundError):
        await manager.set_enabled("missing", True)


@pytest.mark.asyncio
async def test_seed_without_id_can_be_enabled_by_listed_id(registry, loader, cache, transport):
    transport.routes["https://subs.example.com/manifest.json"] = manifest_doc("subs", resources=["subtitles"])
    manager = AddonManager(registry, loader, cache, [AddonSeed(url="https://subs.example.com", enabled=False)])
    await manager.initialize()

    listed_id = manager.list_available()[0]["id"]
    assert listed_id is not None
    assert listed_id.startswith("subs.example.com.")

    descriptor = await manager.set_enabled(listed_id, True)

    assert descriptor.id == "subs"
    assert "subs" in registry
    assert manager.available[0].id == "subs"
    assert manager.list_available()[0]["id"] == "subs"


@pytest.mark.asyncio
async def test_add_configured_seed_url_does_not_duplicate(manager, registry):
    descriptor = await manager.add("https://cinemeta.example.com")

    assert descriptor.id == "cinemeta"
    urls = [seed.url for seed in manager.available]
    assert urls == ["https://cinemeta.example.com/manifest.json", "https://opensubs.example.com"]
    assert manager.available[0].id == "cinemeta"
    assert len(manager.list_available()) == 2


@pytest.mark.asyncio
async def test_add_reenables_disabled_seed(manager, registry):
    await manager.add("https://opensubs.example.com/manifest.json")

    assert len(manager.available) == 2
    assert manager.available[1].enabled is True
    assert "opensubs" in registry
