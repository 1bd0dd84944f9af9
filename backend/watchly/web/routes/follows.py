"""
Follow routes - follow / unfollow một user.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from watchly.web.schemas.auth import ErrorResponse, UserResponse
from watchly.web.schemas.social import FollowStatusResponse
from watchly.web.services.errors import SelfFollowError, UserNotFoundError
from watchly.web.services.follow_service import FollowService
from watchly.web.utils.auth_middleware import get_current_user
from watchly.web.utils.database import get_db

router = APIRouter(prefix="/api/follows", tags=["follows"])


@router.post(
    "/{user_id}",
    response_model=FollowStatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Cannot follow yourself"},
        404: {"model": ErrorResponse, "description": "User not found"}
    }
)
async def follow_user(
    user_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Follow user_id. Gọi lại khi đã follow không tạo edge mới."""
    try:
        await FollowService.follow(db, current_user.id, user_id)
    except SelfFollowError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return FollowStatusResponse(follower_id=current_user.id, following_id=user_id, is_following=True)


@router.delete("/{user_id}", response_model=FollowStatusResponse)
async def unfollow_user(
    user_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await FollowService.unfollow(db, current_user.id, user_id)
    return FollowStatusResponse(follower_id=current_user.id, following_id=user_id, is_following=False)


@router.get("/{user_id}/status", response_model=FollowStatusResponse)
async def follow_status(
    user_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    is_following = await FollowService.is_following(db, current_user.id, user_id)
    return FollowStatusResponse(follower_id=current_user.id, following_id=user_id, is_following=is_following)
