"""
TMDB Client
===========

Async client cho TMDB v3 API: search, discover, movie details, credits,
watch providers. Mọi request có timeout; response thành công có thể được
cache trong Redis (xem TMDBCacheService).
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from watchly.config import settings
from watchly.web.schemas.movie import MovieResult, TVShowResult
from watchly.web.services.tmdb_cache_service import TMDBCacheService, get_tmdb_cache_service

logger = logging.getLogger(__name__)


class TMDBError(Exception):
    """TMDB không trả về response dùng được (network error, non-200, JSON lỗi)."""


class TMDBConfigError(TMDBError):
    """TMDB API key chưa được cấu hình."""


class TMDBClient:
    """Client dùng chung cho cả process, tạo qua get_tmdb_client()."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.themoviedb.org/3",
        image_base_url: str = "https://image.tmdb.org/t/p/w500",
        timeout_seconds: float = 10.0,
        cache: Optional[TMDBCacheService] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.image_base_url = image_base_url.rstrip("/")
        self.cache = cache
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.api_key:
            raise TMDBConfigError("TMDB API key not configured")

        cache_key = None
        if self.cache is not None:
            cache_key = self.cache.make_key(path, params)
            cached = await self.cache.get_json(cache_key)
            if cached is not None:
                logger.debug(f"TMDB cache hit: {path}")
                return cached

        query = {"api_key": self.api_key, **(params or {})}
        try:
            response = await self.http_client.get(f"{self.base_url}{path}", params=query)
        except httpx.HTTPError as e:
            raise TMDBError(f"TMDB request failed for {path}: {e}") from e

        if response.status_code != 200:
            raise TMDBError(f"TMDB API Error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise TMDBError(f"TMDB returned invalid JSON for {path}") from e

        if self.cache is not None and cache_key is not None:
            await self.cache.set_json(cache_key, data)

        return data

    @staticmethod
    def _parse_results(raw_results: List[dict], model) -> list:
        results = []
        for raw in raw_results or []:
            try:
                results.append(model.model_validate({k: v for k, v in raw.items() if k != "media_type"}))
            except ValidationError:
                logger.debug(f"Skipping malformed TMDB result: id={raw.get('id')}")
        return results

    async def search_movies(self, query: str) -> List[MovieResult]:
        if not query.strip():
            return []
        data = await self._get("/search/movie", {"query": query})
        return self._parse_results(data.get("results"), MovieResult)

    async def search_tv(self, query: str) -> List[TVShowResult]:
        if not query.strip():
            return []
        data = await self._get("/search/tv", {"query": query})
        return self._parse_results(data.get("results"), TVShowResult)

    async def search_all(self, query: str) -> list:
        """Movies trước, TV shows sau; hai search chạy song song."""
        movies, tv_shows = await asyncio.gather(
            self.search_movies(query),
            self.search_tv(query)
        )
        return [*movies, *tv_shows]

    async def get_popular_movies(self, page: int = 1) -> List[MovieResult]:
        data = await self._get("/discover/movie", {"sort_by": "popularity.desc", "page": page})
        return self._parse_results(data.get("results"), MovieResult)

    async def get_movie_details(self, tmdb_id: int) -> Dict[str, Any]:
        return await self._get(f"/movie/{tmdb_id}")

    async def get_movie_credits(self, tmdb_id: int) -> Dict[str, Any]:
        return await self._get(f"/movie/{tmdb_id}/credits")

    async def get_watch_providers(self, tmdb_id: int) -> Dict[str, Any]:
        return await self._get(f"/movie/{tmdb_id}/watch/providers")

    def image_url(self, poster_path: Optional[str]) -> Optional[str]:
        if not poster_path:
            return None
        return f"{self.image_base_url}{poster_path}"

    async def aclose(self) -> None:
        await self.http_client.aclose()


# Singleton instance
_tmdb_client_instance: Optional[TMDBClient] = None


def get_tmdb_client() -> TMDBClient:
    """Get singleton instance của TMDBClient (FastAPI dependency)."""
    global _tmdb_client_instance

    if _tmdb_client_instance is None:
        _tmdb_client_instance = TMDBClient(
            api_key=settings.tmdb_api_key,
            base_url=settings.tmdb_base_url,
            image_base_url=settings.tmdb_image_base_url,
            timeout_seconds=settings.tmdb_timeout_seconds,
            cache=get_tmdb_cache_service()
        )
        if not settings.tmdb_api_key:
            logger.warning("TMDB_API_KEY is not set. Posters and movie details will be unavailable.")

    return _tmdb_client_instance


async def close_tmdb_client() -> None:
    global _tmdb_client_instance

    if _tmdb_client_instance is not None:
        await _tmdb_client_instance.aclose()
        _tmdb_client_instance = None
