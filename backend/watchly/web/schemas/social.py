"""
Schemas cho profiles, follows, watch logs và feed.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProfileResponse(BaseModel):
    """Profile đầy đủ của một user."""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    display_name: Optional[str] = None
    email: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    favorite_genres: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ProfileSummary(BaseModel):
    """Thông tin rút gọn dùng trong danh sách follower/following, search và feed."""
    user_id: str
    display_name: Optional[str] = None
    email: str = ""
    avatar_url: Optional[str] = None
    is_following: Optional[bool] = Field(None, description="Viewer có đang follow user này không")


class ProfileUpdateRequest(BaseModel):
    """Các field không gửi lên sẽ được giữ nguyên."""
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=1000)
    avatar_url: Optional[str] = None
    favorite_genres: Optional[List[str]] = None

    @field_validator('favorite_genres')
    @classmethod
    def clean_genres(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        return [genre.strip() for genre in v if genre and genre.strip()]


class WatchLogCreateRequest(BaseModel):
    title: str = Field(..., max_length=500, description="Movie or show title")
    caption: Optional[str] = Field(None, max_length=2000)
    emoji: Optional[str] = Field(None, max_length=32)
    image_url: Optional[str] = None
    is_post: bool = Field(False, description="True nếu log được chia sẻ như một post")

    @field_validator('title')
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Please enter a movie or show title')
        return v

    @field_validator('caption', 'emoji', 'image_url')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class WatchLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    caption: Optional[str] = None
    emoji: Optional[str] = None
    image_url: Optional[str] = None
    is_post: bool = False
    created_at: datetime


class FeedItemResponse(WatchLogResponse):
    """Watch log kèm profile của tác giả."""
    author: ProfileSummary


class FeedResponse(BaseModel):
    items: List[FeedItemResponse]
    total: int


class ProfileStatsResponse(BaseModel):
    user_id: str
    followers_count: int = 0
    following_count: int = 0
    recent_movies: List[WatchLogResponse] = Field(default_factory=list)


class FollowStatusResponse(BaseModel):
    follower_id: str
    following_id: str
    is_following: bool
