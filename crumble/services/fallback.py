"""
Fallback Provider
Static demo content served when addons yield nothing or fail
"""
import hashlib
from typing import Any, Dict, List, Optional
from crumble.core.config import settings

MOVIE_POSTERS = (
    "https://images.unsplash.com/photo-1489599217719-cb37d61610b2?w=300",
    "https://images.unsplash.com/photo-1594909122845-11baa439b7bf?w=300",
)
SERIES_POSTER = "https://images.unsplash.com/photo-1509347528160-9a9e33742cdb?w=300"

MOCK_MOVIES = (
    ("tt0111161", "The Shawshank Redemption", 1994),
    ("tt0068646", "The Godfather", 1972),
    ("tt0071562", "The Godfather: Part II", 1974),
    ("tt0468569", "The Dark Knight", 2008),
    ("tt0050083", "12 Angry Men", 1957),
    ("tt0108052", "Schindler's List", 1993),
    ("tt0167260", "The Lord of the Rings: The Return of the King", 2003),
    ("tt0110912", "Pulp Fiction", 1994),
    ("tt0120737", "The Lord of the Rings: The Fellowship of the Ring", 2001),
    ("tt0060196", "The Good, the Bad and the Ugly", 1966),
    ("tt0109830", "Forrest Gump", 1994),
    ("tt0137523", "Fight Club", 1999),
    ("tt1375666", "Inception", 2010),
    ("tt0080684", "Star Wars: Episode V - The Empire Strikes Back", 1980),
    ("tt0167261", "The Lord of the Rings: The Two Towers", 2002),
    ("tt0073486", "One Flew Over the Cuckoo's Nest", 1975),
    ("tt0099685", "Goodfellas", 1990),
    ("tt0076759", "Star Wars", 1977),
    ("tt0317248", "City of God", 2002),
    ("tt0114369", "Se7en", 1995),
)

MOCK_SERIES = (
    ("tt0944947", "Game of Thrones", 2011),
    ("tt0903747", "Breaking Bad", 2008),
    ("tt0795176", "Planet Earth", 2006),
    ("tt0185906", "Band of Brothers", 2001),
    ("tt7366338", "Chernobyl", 2019),
    ("tt0306414", "The Wire", 2002),
    ("tt0141842", "The Sopranos", 1999),
    ("tt1475582", "Sherlock", 2010),
    ("tt2356777", "True Detective", 2014),
    ("tt2560140", "Attack on Titan", 2013),
)

MOCK_GENRES = ["Drama", "Action", "Adventure", "Thriller", "Crime"]


def synthetic_rating(item_id: str) -> str:
    """Stable pseudo rating in [7.0, 9.9] derived from the id"""
    bucket = int(hashlib.md5(item_id.encode("utf-8")).hexdigest(), 16) % 30
    return f"{7.0 + bucket / 10:.1f}"


class FallbackProvider:
    """Deterministic, hardcoded dataset in the same shape the aggregator returns"""

    def __init__(self, default_count: Optional[int] = None):
        self.default_count = default_count or settings.MOCK_CATALOG_SIZE

    @staticmethod
    def _dataset(media_type: str):
        return MOCK_SERIES if media_type == "series" else MOCK_MOVIES

    @staticmethod
    def _build_item(index: int, item: tuple, media_type: str, category: str) -> Dict[str, Any]:
        item_id, name, year = item
        is_series = media_type == "series"
        poster = SERIES_POSTER if is_series else MOVIE_POSTERS[index % 2]
        blurb = "Highly rated and popular." if category == "top" else "Trending content."
        return {
            "id": item_id,
            "type": media_type,
            "name": name,
            "releaseInfo": str(year),
            "year": year,
            "poster": poster,
            "background": poster,
            "description": f"This is a {'TV series' if is_series else 'movie'} from {year}. {blurb}",
            "runtime": None if is_series else "120 min",
            "genres": list(MOCK_GENRES),
            "imdbRating": synthetic_rating(item_id),
        }

    def mock_catalog(self, media_type: str, category: str = "top", count: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Static catalog records

        Args:
            media_type: "movie" or "series"; anything else gets movies
            category: Catalog name, only affects the description
            count: Number of records (capped at the dataset size)
        """
        count = self.default_count if count is None else count
        dataset = self._dataset(media_type)[:max(count, 0)]
        return [self._build_item(i, item, media_type, category) for i, item in enumerate(dataset)]

    def mock_meta(self, media_type: str, item_id: str) -> Optional[Dict[str, Any]]:
        """Fixed record for a known id, None otherwise"""
        for index, item in enumerate(self._dataset(media_type)):
            if item[0] == item_id:
                return self._build_item(index, item, media_type, "top")
        return None

    def placeholder_meta(self, media_type: str, item_id: str) -> Dict[str, Any]:
        """Generic demo record for ids outside the static dataset"""
        return {
            "id": item_id,
            "type": media_type,
            "name": "Mock Series" if media_type == "series" else "Mock Movie",
            "poster": SERIES_POSTER if media_type == "series" else MOVIE_POSTERS[0],
            "description": f"Mock description for {item_id}",
            "releaseInfo": "2024",
            "imdbRating": synthetic_rating(item_id),
            "runtime": "120 min",
        }

    def mock_search(self, query: str, media_type: str = "movie", count: int = 10) -> List[Dict[str, Any]]:
        """
        Static records whose name contains the query

        Falls back to the first `count` records when nothing matches so a
        search page never comes back empty.
        """
        records = self.mock_catalog(media_type, "top", len(self._dataset(media_type)))
        needle = (query or "").strip().lower()
        matches = [r for r in records if needle and needle in r["name"].lower()]
        return (matches or records)[:count]

    def mock_streams(self, media_type: str, item_id: str) -> List[Dict[str, Any]]:
        return [
            {"name": "Mock Stream 1", "title": "HD Stream", "url": "https://example.com/stream1"},
            {"name": "Mock Stream 2", "title": "4K Stream", "url": "https://example.com/stream2"},
        ]
