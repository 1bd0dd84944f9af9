"""
Schemas cho dữ liệu TMDB (search results, movie detail).

Movie và TV show là một tagged union với discriminant `media_type`.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, computed_field


def year_of(date_str: Optional[str]) -> Optional[int]:
    """Năm của ngày dạng YYYY-MM-DD, None nếu thiếu hoặc sai định dạng."""
    if not date_str or len(date_str) < 4 or not date_str[:4].isdigit():
        return None
    return int(date_str[:4])


class MovieResult(BaseModel):
    media_type: Literal["movie"] = "movie"
    id: int
    title: str
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    genre_ids: List[int] = Field(default_factory=list)

    @computed_field
    @property
    def display_title(self) -> str:
        return self.title

    @computed_field
    @property
    def release_year(self) -> Optional[int]:
        return year_of(self.release_date)


class TVShowResult(BaseModel):
    media_type: Literal["tv"] = "tv"
    id: int
    name: str
    poster_path: Optional[str] = None
    first_air_date: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    genre_ids: List[int] = Field(default_factory=list)

    @computed_field
    @property
    def display_title(self) -> str:
        return self.name

    @computed_field
    @property
    def release_year(self) -> Optional[int]:
        return year_of(self.first_air_date)


MediaItem = Annotated[Union[MovieResult, TVShowResult], Field(discriminator="media_type")]


class MediaSearchResponse(BaseModel):
    query: str
    results: List[MediaItem]
    total: int


class CastMember(BaseModel):
    id: Optional[int] = None
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None


class MovieDetailResponse(BaseModel):
    """
    Detail view của một recommendation: details + credits + watch providers.
    Phần nào lookup thất bại thì để rỗng.
    """
    tmdb_id: int
    title: Optional[str] = None
    overview: Optional[str] = None
    runtime: Optional[int] = None
    release_year: Optional[int] = None
    poster_url: Optional[str] = None
    vote_average: Optional[float] = None
    genres: List[str] = Field(default_factory=list)
    cast: List[CastMember] = Field(default_factory=list)
    director: str = "Unknown"
    streaming: Dict[str, Any] = Field(default_factory=dict)
