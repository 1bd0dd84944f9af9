"""
Watch Log Service
=================

Watch logs của user và feed (logs của mình + posts của người mình follow).
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from watchly.web.schemas.social import (
    FeedItemResponse,
    FeedResponse,
    ProfileSummary,
    WatchLogCreateRequest,
    WatchLogResponse,
)
from watchly.web.services.errors import WatchLogNotFoundError, WatchLogPermissionError
from watchly.web.utils.database import timestamp_params, utcnow

logger = logging.getLogger(__name__)

FEED_LIMIT = 100
UNKNOWN_AUTHOR = "Unknown User"


def _row_to_log(row) -> WatchLogResponse:
    return WatchLogResponse(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        caption=row.caption,
        emoji=row.emoji,
        image_url=row.image_url,
        is_post=bool(row.is_post),
        created_at=row.created_at
    )


class WatchLogService:
    """Service xử lý watch logs và feed."""

    @staticmethod
    async def create_log(
        db: AsyncSession,
        user_id: str,
        log_data: WatchLogCreateRequest
    ) -> WatchLogResponse:
        log = WatchLogResponse(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=log_data.title,
            caption=log_data.caption,
            emoji=log_data.emoji,
            image_url=log_data.image_url,
            is_post=log_data.is_post,
            created_at=utcnow()
        )

        await db.execute(
            text("""
                INSERT INTO watch_logs (id, user_id, title, caption, emoji, image_url, is_post, created_at)
                VALUES (:id, :user_id, :title, :caption, :emoji, :image_url, :is_post, :created_at)
            """).bindparams(*timestamp_params("created_at")),
            log.model_dump()
        )
        await db.commit()

        logger.info(
            f"{'Posted' if log.is_post else 'Logged'} {log.title!r} for user {user_id} (id={log.id})"
        )
        return log

    @staticmethod
    async def get_log(db: AsyncSession, log_id: str) -> Optional[WatchLogResponse]:
        result = await db.execute(
            text("""
                SELECT id, user_id, title, caption, emoji, image_url, is_post, created_at
                FROM watch_logs
                WHERE id = :log_id
            """),
            {"log_id": log_id}
        )
        row = result.fetchone()
        return _row_to_log(row) if row else None

    @staticmethod
    async def list_user_logs(
        db: AsyncSession,
        user_id: str,
        limit: Optional[int] = None
    ) -> List[WatchLogResponse]:
        """Logs của user, mới nhất trước."""
        query = """
            SELECT id, user_id, title, caption, emoji, image_url, is_post, created_at
            FROM watch_logs
            WHERE user_id = :user_id
            ORDER BY created_at DESC
        """
        params = {"user_id": user_id}

        if limit is not None:
            query += " LIMIT :limit"
            params["limit"] = limit

        result = await db.execute(text(query), params)
        return [_row_to_log(row) for row in result.fetchall()]

    @staticmethod
    async def delete_log(
        db: AsyncSession,
        log_id: str,
        user_id: str
    ) -> None:
        """
        Raises:
            WatchLogNotFoundError: log không tồn tại
            WatchLogPermissionError: log thuộc về user khác
        """
        log = await WatchLogService.get_log(db, log_id)
        if log is None:
            raise WatchLogNotFoundError(log_id)
        if log.user_id != user_id:
            raise WatchLogPermissionError(log_id)

        await db.execute(
            text("DELETE FROM watch_logs WHERE id = :log_id AND user_id = :user_id"),
            {"log_id": log_id, "user_id": user_id}
        )
        await db.commit()
        logger.info(f"Deleted watch log {log_id} of user {user_id}")

    @staticmethod
    async def get_feed(
        db: AsyncSession,
        user_id: str,
        limit: int = FEED_LIMIT
    ) -> FeedResponse:
        """
        Feed = tất cả logs của user + posts (is_post) của những người user follow,
        kèm profile tác giả, mới nhất trước.
        """
        result = await db.execute(
            text("""
                SELECT w.id, w.user_id, w.title, w.caption, w.emoji, w.image_url,
                       w.is_post, w.created_at,
                       p.display_name AS author_display_name,
                       p.email AS author_email,
                       p.avatar_url AS author_avatar_url
                FROM watch_logs w
                LEFT JOIN profiles p ON p.user_id = w.user_id
                WHERE w.user_id = :user_id
                   OR (w.is_post = :is_post AND w.user_id IN (
                        SELECT following_id FROM follows WHERE follower_id = :user_id
                   ))
                ORDER BY w.created_at DESC
                LIMIT :limit
            """),
            {"user_id": user_id, "is_post": True, "limit": limit}
        )

        items = []
        for row in result.fetchall():
            log = _row_to_log(row)
            if row.author_email is None:
                author = ProfileSummary(user_id=row.user_id, display_name=UNKNOWN_AUTHOR)
            else:
                author = ProfileSummary(
                    user_id=row.user_id,
                    display_name=row.author_display_name,
                    email=row.author_email,
                    avatar_url=row.author_avatar_url
                )
            items.append(FeedItemResponse(**log.model_dump(), author=author))

        return FeedResponse(items=items, total=len(items))
