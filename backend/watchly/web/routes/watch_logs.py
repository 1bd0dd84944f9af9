"""
Watch log routes
================

Log / post phim đã xem, xem logs của mình hoặc của user khác, xóa log, feed.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from watchly.web.schemas.auth import ErrorResponse, UserResponse
from watchly.web.schemas.social import FeedResponse, WatchLogCreateRequest, WatchLogResponse
from watchly.web.services.errors import WatchLogNotFoundError, WatchLogPermissionError
from watchly.web.services.watch_log_service import WatchLogService
from watchly.web.utils.auth_middleware import get_current_user
from watchly.web.utils.database import get_db

router = APIRouter(tags=["watch logs"])


@router.post(
    "/api/watch-logs",
    response_model=WatchLogResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_watch_log(
    log_data: WatchLogCreateRequest,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Log một phim/show. `is_post=true` để chia sẻ lên feed của followers.

    `image_url` là URL của ảnh đã upload sẵn.
    """
    return await WatchLogService.create_log(db, current_user.id, log_data)


@router.get("/api/watch-logs/me", response_model=List[WatchLogResponse])
async def get_my_watch_logs(
    limit: Optional[int] = Query(None, ge=1, le=500),
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await WatchLogService.list_user_logs(db, current_user.id, limit=limit)


@router.get("/api/watch-logs/user/{user_id}", response_model=List[WatchLogResponse])
async def get_user_watch_logs(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, le=500),
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await WatchLogService.list_user_logs(db, user_id, limit=limit)


@router.delete(
    "/api/watch-logs/{log_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"model": ErrorResponse, "description": "Not the owner"},
        404: {"model": ErrorResponse, "description": "Watch log not found"}
    }
)
async def delete_watch_log(
    log_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        await WatchLogService.delete_log(db, log_id, current_user.id)
    except WatchLogNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WatchLogPermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.get("/api/feed", response_model=FeedResponse)
async def get_feed(
    limit: int = Query(100, ge=1, le=500),
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Logs của mình + posts của những người mình follow, mới nhất trước."""
    return await WatchLogService.get_feed(db, current_user.id, limit=limit)
