"""
Profile routes
==============

Xem/sửa profile, search user, thống kê, danh sách followers/following.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from watchly.web.schemas.auth import ErrorResponse, UserResponse
from watchly.web.schemas.social import (
    ProfileResponse,
    ProfileStatsResponse,
    ProfileSummary,
    ProfileUpdateRequest,
)
from watchly.web.services.follow_service import FollowService
from watchly.web.services.profile_service import ProfileService
from watchly.web.utils.auth_middleware import get_current_user
from watchly.web.utils.database import get_db

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


async def _require_profile(db: AsyncSession, user_id: str) -> ProfileResponse:
    profile = await ProfileService.get_profile(db, user_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    return profile


@router.get("/me", response_model=ProfileResponse, responses={404: {"model": ErrorResponse}})
async def get_my_profile(
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _require_profile(db, current_user.id)


@router.patch("/me", response_model=ProfileResponse, responses={404: {"model": ErrorResponse}})
async def update_my_profile(
    update: ProfileUpdateRequest,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Cập nhật display_name, bio, avatar_url, favorite_genres.
    Field không gửi lên sẽ được giữ nguyên.
    """
    profile = await ProfileService.update_profile(db, current_user.id, update)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    return profile


@router.get("/search", response_model=List[ProfileSummary])
async def search_profiles(
    q: str = Query("", max_length=100, description="Search theo tên hoặc email"),
    limit: int = Query(10, ge=1, le=50),
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProfileService.search_profiles(db, q, viewer_id=current_user.id, limit=limit)


@router.get("/{user_id}", response_model=ProfileResponse, responses={404: {"model": ErrorResponse}})
async def get_profile(
    user_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _require_profile(db, user_id)


@router.get("/{user_id}/stats", response_model=ProfileStatsResponse, responses={404: {"model": ErrorResponse}})
async def get_profile_stats(
    user_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Số followers, following và 5 watch logs gần nhất."""
    await _require_profile(db, user_id)
    return await ProfileService.get_profile_stats(db, user_id)


@router.get("/{user_id}/followers", response_model=List[ProfileSummary])
async def get_followers(
    user_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await FollowService.list_followers(db, user_id, viewer_id=current_user.id)


@router.get("/{user_id}/following", response_model=List[ProfileSummary])
async def get_following(
    user_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await FollowService.list_following(db, user_id, viewer_id=current_user.id)
