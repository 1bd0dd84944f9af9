"""
Movie routes
============

TMDB search (cho movie logger), popular movies và detail view của recommendation.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from watchly.config import settings
from watchly.integrations.tmdb_client import TMDBClient, TMDBConfigError, TMDBError, get_tmdb_client
from watchly.web.schemas.auth import ErrorResponse
from watchly.web.schemas.movie import MediaSearchResponse, MovieDetailResponse
from watchly.web.services.movie_service import MovieService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/movies", tags=["movies"])

TMDB_ERROR_RESPONSES = {
    502: {"model": ErrorResponse, "description": "TMDB request failed"},
    503: {"model": ErrorResponse, "description": "TMDB not configured"}
}


def _tmdb_http_error(e: TMDBError) -> HTTPException:
    if isinstance(e, TMDBConfigError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    logger.error(f"TMDB error: {e}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/search", response_model=MediaSearchResponse, responses=TMDB_ERROR_RESPONSES)
async def search_media(
    q: str = Query("", max_length=200, description="Title cần tìm"),
    media_type: Literal["all", "movie", "tv"] = Query("all"),
    tmdb_client: TMDBClient = Depends(get_tmdb_client)
):
    """Search movies và/hoặc TV shows. Mỗi kết quả có `media_type` là `movie` hoặc `tv`."""
    try:
        results = await MovieService.search(tmdb_client, q, media_type=media_type)
    except TMDBError as e:
        raise _tmdb_http_error(e)
    return MediaSearchResponse(query=q, results=results, total=len(results))


@router.get("/popular", response_model=MediaSearchResponse, responses=TMDB_ERROR_RESPONSES)
async def popular_movies(
    page: int = Query(1, ge=1, le=500),
    tmdb_client: TMDBClient = Depends(get_tmdb_client)
):
    try:
        results = await tmdb_client.get_popular_movies(page=page)
    except TMDBError as e:
        raise _tmdb_http_error(e)
    return MediaSearchResponse(query="", results=results, total=len(results))


@router.get("/{tmdb_id}", response_model=MovieDetailResponse, responses=TMDB_ERROR_RESPONSES)
async def movie_detail(
    tmdb_id: int,
    tmdb_client: TMDBClient = Depends(get_tmdb_client)
):
    """
    Details + credits + watch providers của một movie.
    Phần nào TMDB không trả về được thì để rỗng.
    """
    try:
        return await MovieService.get_movie_detail(tmdb_client, tmdb_id, region=settings.tmdb_watch_region)
    except TMDBError as e:
        raise _tmdb_http_error(e)
