"""
Follow Service
==============

Follow edges: follower_id -> following_id. Mỗi cặp chỉ có một edge.
"""

import logging
import uuid
from typing import List

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from watchly.web.schemas.social import ProfileSummary
from watchly.web.services.errors import SelfFollowError, UserNotFoundError
from watchly.web.utils.database import timestamp_params, utcnow

logger = logging.getLogger(__name__)


class FollowService:
    """Service xử lý follow/unfollow."""

    @staticmethod
    async def follow(
        db: AsyncSession,
        follower_id: str,
        following_id: str
    ) -> bool:
        """
        Insert edge nếu chưa tồn tại.

        Returns:
            True nếu edge mới được tạo, False nếu đã follow từ trước

        Raises:
            SelfFollowError: follower_id == following_id
            UserNotFoundError: following_id không tồn tại
        """
        if follower_id == following_id:
            raise SelfFollowError()

        result = await db.execute(
            text("SELECT id FROM users WHERE id = :user_id"),
            {"user_id": following_id}
        )
        if result.fetchone() is None:
            raise UserNotFoundError(following_id)

        result = await db.execute(
            text("""
                INSERT INTO follows (id, follower_id, following_id, created_at)
                VALUES (:id, :follower_id, :following_id, :created_at)
                ON CONFLICT (follower_id, following_id) DO NOTHING
            """).bindparams(*timestamp_params("created_at")),
            {
                "id": str(uuid.uuid4()),
                "follower_id": follower_id,
                "following_id": following_id,
                "created_at": utcnow()
            }
        )
        await db.commit()

        created = result.rowcount == 1
        if created:
            logger.info(f"User {follower_id} followed {following_id}")
        return created

    @staticmethod
    async def unfollow(
        db: AsyncSession,
        follower_id: str,
        following_id: str
    ) -> bool:
        """
        Xóa edge theo composite key.

        Returns:
            True nếu có edge bị xóa
        """
        result = await db.execute(
            text("""
                DELETE FROM follows
                WHERE follower_id = :follower_id AND following_id = :following_id
            """),
            {"follower_id": follower_id, "following_id": following_id}
        )
        await db.commit()

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"User {follower_id} unfollowed {following_id}")
        return deleted

    @staticmethod
    async def is_following(
        db: AsyncSession,
        follower_id: str,
        following_id: str
    ) -> bool:
        result = await db.execute(
            text("""
                SELECT id FROM follows
                WHERE follower_id = :follower_id AND following_id = :following_id
            """),
            {"follower_id": follower_id, "following_id": following_id}
        )
        return result.fetchone() is not None

    @staticmethod
    async def get_following_ids(db: AsyncSession, user_id: str) -> List[str]:
        result = await db.execute(
            text("""
                SELECT following_id FROM follows
                WHERE follower_id = :user_id
                ORDER BY created_at DESC
            """),
            {"user_id": user_id}
        )
        return [row.following_id for row in result.fetchall()]

    @staticmethod
    async def get_follower_ids(db: AsyncSession, user_id: str) -> List[str]:
        result = await db.execute(
            text("""
                SELECT follower_id FROM follows
                WHERE following_id = :user_id
                ORDER BY created_at DESC
            """),
            {"user_id": user_id}
        )
        return [row.follower_id for row in result.fetchall()]

    @staticmethod
    async def count_followers(db: AsyncSession, user_id: str) -> int:
        result = await db.execute(
            text("SELECT COUNT(*) FROM follows WHERE following_id = :user_id"),
            {"user_id": user_id}
        )
        return result.scalar_one()

    @staticmethod
    async def count_following(db: AsyncSession, user_id: str) -> int:
        result = await db.execute(
            text("SELECT COUNT(*) FROM follows WHERE follower_id = :user_id"),
            {"user_id": user_id}
        )
        return result.scalar_one()

    @staticmethod
    async def list_followers(
        db: AsyncSession,
        user_id: str,
        viewer_id: str
    ) -> List[ProfileSummary]:
        """Profiles của những người follow user_id, kèm is_following cho viewer."""
        return await FollowService._list_profiles(db, user_id, viewer_id, direction="followers")

    @staticmethod
    async def list_following(
        db: AsyncSession,
        user_id: str,
        viewer_id: str
    ) -> List[ProfileSummary]:
        """Profiles của những người user_id đang follow, kèm is_following cho viewer."""
        return await FollowService._list_profiles(db, user_id, viewer_id, direction="following")

    @staticmethod
    async def _list_profiles(
        db: AsyncSession,
        user_id: str,
        viewer_id: str,
        direction: str
    ) -> List[ProfileSummary]:
        if direction == "followers":
            join_column, filter_column = "follower_id", "following_id"
        else:
            join_column, filter_column = "following_id", "follower_id"

        result = await db.execute(
            text(f"""
                SELECT p.user_id, p.display_name, p.email, p.avatar_url
                FROM follows f
                JOIN profiles p ON p.user_id = f.{join_column}
                WHERE f.{filter_column} = :user_id
                ORDER BY f.created_at DESC
            """),
            {"user_id": user_id}
        )
        rows = result.fetchall()

        viewer_following = set(await FollowService.get_following_ids(db, viewer_id))
        return [
            ProfileSummary(
                user_id=row.user_id,
                display_name=row.display_name,
                email=row.email,
                avatar_url=row.avatar_url,
                is_following=row.user_id in viewer_following
            )
            for row in rows
        ]
