"""
Movie Service
=============

Detail view cho một recommendation và search TMDB cho movie logger.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, List

from watchly.integrations.tmdb_client import TMDBClient, TMDBConfigError, TMDBError
from watchly.web.schemas.movie import CastMember, MovieDetailResponse, year_of

logger = logging.getLogger(__name__)

CAST_LIMIT = 6


async def _or_empty(lookup: Awaitable[Dict[str, Any]], label: str, tmdb_id: int) -> Dict[str, Any]:
    try:
        return await lookup
    except TMDBConfigError:
        raise
    except TMDBError as e:
        logger.warning(f"TMDB {label} lookup failed for {tmdb_id}: {e}")
        return {}


class MovieService:
    """Service xử lý movie metadata."""

    @staticmethod
    async def get_movie_detail(
        tmdb_client: TMDBClient,
        tmdb_id: int,
        region: str = "US"
    ) -> MovieDetailResponse:
        """
        Lấy details, credits và watch providers song song rồi merge.

        Phần nào lookup thất bại thì dùng giá trị rỗng: cast=[], streaming={},
        director="Unknown", các field của details=None.

        Raises:
            TMDBConfigError: nếu TMDB API key chưa được cấu hình
        """
        details, credits, providers = await asyncio.gather(
            _or_empty(tmdb_client.get_movie_details(tmdb_id), "details", tmdb_id),
            _or_empty(tmdb_client.get_movie_credits(tmdb_id), "credits", tmdb_id),
            _or_empty(tmdb_client.get_watch_providers(tmdb_id), "providers", tmdb_id),
        )

        cast = []
        for person in (credits.get("cast") or [])[:CAST_LIMIT]:
            if not person.get("name"):
                continue
            cast.append(CastMember(
                id=person.get("id"),
                name=person["name"],
                character=person.get("character"),
                profile_path=person.get("profile_path")
            ))

        director = next(
            (person.get("name") for person in (credits.get("crew") or [])
             if person.get("job") == "Director" and person.get("name")),
            "Unknown"
        )

        streaming = (providers.get("results") or {}).get(region) or {}

        genres = [genre["name"] for genre in (details.get("genres") or []) if genre.get("name")]

        return MovieDetailResponse(
            tmdb_id=tmdb_id,
            title=details.get("title"),
            overview=details.get("overview"),
            runtime=details.get("runtime"),
            release_year=year_of(details.get("release_date")),
            poster_url=tmdb_client.image_url(details.get("poster_path")),
            vote_average=details.get("vote_average"),
            genres=genres,
            cast=cast,
            director=director,
            streaming=streaming
        )

    @staticmethod
    async def search(
        tmdb_client: TMDBClient,
        query: str,
        media_type: str = "all"
    ) -> List:
        if media_type == "movie":
            return await tmdb_client.search_movies(query)
        if media_type == "tv":
            return await tmdb_client.search_tv(query)
        return await tmdb_client.search_all(query)
