"""
Tests for static fallback content
"""
from crumble.services.fallback import MOCK_MOVIES, MOCK_SERIES, FallbackProvider, synthetic_rating


def test_mock_catalog_movies(fallback):
    """Test default movie catalog size and shape"""
    items = fallback.mock_catalog("movie", "top")

    assert len(items) == 20
    assert items[0]["id"] == "tt0111161"
    assert items[0]["name"] == "The Shawshank Redemption"
    assert items[0]["type"] == "movie"
    assert all(item["id"] and item["name"] for item in items)


def test_mock_catalog_series_capped_at_dataset(fallback):
    items = fallback.mock_catalog("series", "top", count=50)

    assert len(items) == len(MOCK_SERIES)
    assert items[0]["name"] == "Game of Thrones"
    assert items[0]["runtime"] is None


def test_mock_catalog_is_deterministic(fallback):
    assert fallback.mock_catalog("movie", "year", 5) == fallback.mock_catalog("movie", "year", 5)


def test_mock_catalog_count_override():
    provider = FallbackProvider(default_count=3)
    assert len(provider.mock_catalog("movie")) == 3
    assert len(provider.mock_catalog("movie", count=0)) == 0


def test_synthetic_rating_range():
    for item_id, _, _ in MOCK_MOVIES:
        rating = float(synthetic_rating(item_id))
        assert 7.0 <= rating <= 9.9
    assert synthetic_rating("tt1") == synthetic_rating("tt1")


def test_mock_meta_known_and_unknown(fallback):
    meta = fallback.mock_meta("movie", "tt0468569")

    assert meta["name"] == "The Dark Knight"
    assert fallback.mock_meta("movie", "tt0944947") is None
    assert fallback.mock_meta("movie", "tt404") is None


def test_placeholder_meta_uses_requested_id(fallback):
    meta = fallback.placeholder_meta("series", "tt404")

    assert meta["id"] == "tt404"
    assert meta["type"] == "series"
    assert meta["name"] == "Mock Series"


def test_mock_search_matches_or_returns_first(fallback):
    matches = fallback.mock_search("godfather")
    assert [m["id"] for m in matches] == ["tt0068646", "tt0071562"]

    nothing = fallback.mock_search("zzzz", count=3)
    assert [m["id"] for m in nothing] == [m[0] for m in MOCK_MOVIES[:3]]


def test_mock_streams_nonempty(fallback):
    streams = fallback.mock_streams("movie", "tt1")

    assert len(streams) == 2
    assert all(s["url"].startswith("https://") for s in streams)
