"""
Unit tests for the recommendation detail view (details + credits + providers).
"""

import unittest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from watchly.integrations.tmdb_client import TMDBClient, TMDBConfigError, TMDBError, get_tmdb_client
from watchly.main import app
from watchly.web.services.movie_service import MovieService

DETAILS = {
    "id": 129,
    "title": "Spirited Away",
    "overview": "A young girl wanders into a world of spirits.",
    "runtime": 125,
    "release_date": "2001-07-20",
    "poster_path": "/sa.jpg",
    "vote_average": 8.5,
    "genres": [{"id": 16, "name": "Animation"}, {"id": 14, "name": "Fantasy"}],
}

CREDITS = {
    "cast": [{"id": i, "name": f"Actor {i}", "character": f"Role {i}"} for i in range(10)],
    "crew": [
        {"name": "Toshio Suzuki", "job": "Producer"},
        {"name": "Hayao Miyazaki", "job": "Director"},
    ],
}

PROVIDERS = {
    "results": {
        "US": {"link": "https://www.themoviedb.org/movie/129/watch", "flatrate": [{"provider_name": "Max"}]},
        "GB": {"flatrate": [{"provider_name": "Netflix"}]},
    }
}


def make_tmdb(details=DETAILS, credits=CREDITS, providers=PROVIDERS):
    client = MagicMock(spec=TMDBClient)
    client.image_url.side_effect = lambda path: f"https://image.tmdb.org/t/p/w500{path}" if path else None

    def as_mock(value):
        if isinstance(value, Exception):
            return AsyncMock(side_effect=value)
        return AsyncMock(return_value=value)

    client.get_movie_details = as_mock(details)
    client.get_movie_credits = as_mock(credits)
    client.get_watch_providers = as_mock(providers)
    return client


class TestMovieDetail(unittest.IsolatedAsyncioTestCase):

    async def test_merges_three_lookups(self):
        detail = await MovieService.get_movie_detail(make_tmdb(), 129)

        self.assertEqual(detail.title, "Spirited Away")
        self.assertEqual(detail.runtime, 125)
        self.assertEqual(detail.release_year, 2001)
        self.assertEqual(detail.genres, ["Animation", "Fantasy"])
        self.assertEqual(detail.poster_url, "https://image.tmdb.org/t/p/w500/sa.jpg")
        self.assertEqual(len(detail.cast), 6)
        self.assertEqual(detail.cast[0].name, "Actor 0")
        self.assertEqual(detail.director, "Hayao Miyazaki")
        self.assertEqual(detail.streaming["flatrate"][0]["provider_name"], "Max")

    async def test_region_selects_provider_block(self):
        detail = await MovieService.get_movie_detail(make_tmdb(), 129, region="GB")
        self.assertEqual(detail.streaming["flatrate"][0]["provider_name"], "Netflix")

    async def test_failed_lookups_default_to_empty(self):
        """Test missing credits and providers default to empty collections."""
        tmdb = make_tmdb(credits=TMDBError("TMDB API Error: 500"), providers=TMDBError("timeout"))
        detail = await MovieService.get_movie_detail(tmdb, 129)

        self.assertEqual(detail.title, "Spirited Away")
        self.assertEqual(detail.cast, [])
        self.assertEqual(detail.director, "Unknown")
        self.assertEqual(detail.streaming, {})

    async def test_all_lookups_missing(self):
        tmdb = make_tmdb(details=TMDBError("404"), credits={}, providers={"results": {}})
        detail = await MovieService.get_movie_detail(tmdb, 42)

        self.assertEqual(detail.tmdb_id, 42)
        self.assertIsNone(detail.title)
        self.assertIsNone(detail.poster_url)
        self.assertEqual(detail.genres, [])
        self.assertEqual(detail.cast, [])
        self.assertEqual(detail.streaming, {})

    async def test_missing_config_propagates(self):
        tmdb = make_tmdb(details=TMDBConfigError("TMDB API key not configured"))
        with self.assertRaises(TMDBConfigError):
            await MovieService.get_movie_detail(tmdb, 1)


class TestMovieRoutes(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_detail_route(self):
        app.dependency_overrides[get_tmdb_client] = lambda: make_tmdb()
        response = self.client.get("/api/movies/129")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["director"], "Hayao Miyazaki")

    def test_detail_route_without_api_key(self):
        app.dependency_overrides[get_tmdb_client] = lambda: make_tmdb(
            details=TMDBConfigError("TMDB API key not configured")
        )
        response = self.client.get("/api/movies/129")
        self.assertEqual(response.status_code, 503)

    def test_search_route_tags_media_type(self):
        from watchly.web.schemas.movie import MovieResult, TVShowResult

        tmdb = make_tmdb()
        tmdb.search_all = AsyncMock(return_value=[
            MovieResult(id=1, title="Heat", release_date="1995-12-15"),
            TVShowResult(id=2, name="Heated Rivalry", first_air_date="2025-11-28"),
        ])
        app.dependency_overrides[get_tmdb_client] = lambda: tmdb

        response = self.client.get("/api/movies/search", params={"q": "heat"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["total"], 2)
        self.assertEqual([r["media_type"] for r in data["results"]], ["movie", "tv"])
        self.assertEqual(data["results"][1]["display_title"], "Heated Rivalry")
        self.assertEqual(data["results"][0]["release_year"], 1995)

    def test_popular_route(self):
        from watchly.web.schemas.movie import MovieResult

        tmdb = make_tmdb()
        tmdb.get_popular_movies = AsyncMock(return_value=[MovieResult(id=7, title="Dune")])
        app.dependency_overrides[get_tmdb_client] = lambda: tmdb

        response = self.client.get("/api/movies/popular", params={"page": 2})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["results"][0]["display_title"], "Dune")
        tmdb.get_popular_movies.assert_awaited_once_with(page=2)

    def test_search_route_upstream_failure(self):
        tmdb = make_tmdb()
        tmdb.search_movies = AsyncMock(side_effect=TMDBError("TMDB API Error: 500"))
        app.dependency_overrides[get_tmdb_client] = lambda: tmdb

        response = self.client.get("/api/movies/search", params={"q": "heat", "media_type": "movie"})
        self.assertEqual(response.status_code, 502)


if __name__ == '__main__':
    unittest.main()
