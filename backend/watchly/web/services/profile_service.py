"""
Profile Service
===============

Đọc/ghi bảng profiles, search user, thống kê profile.
"""

import json
import logging
from typing import List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from watchly.web.schemas.social import (
    ProfileResponse,
    ProfileStatsResponse,
    ProfileSummary,
    ProfileUpdateRequest,
)
from watchly.web.services.follow_service import FollowService
from watchly.web.services.watch_log_service import WatchLogService
from watchly.web.utils.database import timestamp_params, utcnow

logger = logging.getLogger(__name__)

RECENT_MOVIES_LIMIT = 5
SEARCH_LIMIT = 10


def _parse_genres(raw) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, list):
        return raw
    try:
        genres = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Invalid favorite_genres value: {raw!r}")
        return []
    return [str(g) for g in genres] if isinstance(genres, list) else []


def _row_to_profile(row) -> ProfileResponse:
    return ProfileResponse(
        user_id=row.user_id,
        display_name=row.display_name,
        email=row.email,
        bio=row.bio,
        avatar_url=row.avatar_url,
        favorite_genres=_parse_genres(row.favorite_genres),
        created_at=row.created_at,
        updated_at=row.updated_at
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProfileService:
    """Service xử lý profiles."""

    @staticmethod
    async def create_profile(
        db: AsyncSession,
        user_id: str,
        email: str,
        display_name: Optional[str] = None
    ) -> None:
        """Tạo profile rỗng cho user mới (không commit)."""
        now = utcnow()
        await db.execute(
            text("""
                INSERT INTO profiles (user_id, display_name, email, favorite_genres, created_at, updated_at)
                VALUES (:user_id, :display_name, :email, :favorite_genres, :created_at, :updated_at)
            """).bindparams(*timestamp_params("created_at", "updated_at")),
            {
                "user_id": user_id,
                "display_name": display_name,
                "email": email,
                "favorite_genres": "[]",
                "created_at": now,
                "updated_at": now
            }
        )

    @staticmethod
    async def get_profile(
        db: AsyncSession,
        user_id: str
    ) -> Optional[ProfileResponse]:
        result = await db.execute(
            text("""
                SELECT user_id, display_name, email, bio, avatar_url,
                       favorite_genres, created_at, updated_at
                FROM profiles
                WHERE user_id = :user_id
            """),
            {"user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_profile(row) if row else None

    @staticmethod
    async def get_profiles_by_ids(
        db: AsyncSession,
        user_ids: List[str]
    ) -> List[ProfileSummary]:
        if not user_ids:
            return []

        result = await db.execute(
            text("""
                SELECT user_id, display_name, email, avatar_url
                FROM profiles
                WHERE user_id IN :user_ids
            """).bindparams(bindparam("user_ids", expanding=True)),
            {"user_ids": list(user_ids)}
        )
        return [
            ProfileSummary(
                user_id=row.user_id,
                display_name=row.display_name,
                email=row.email,
                avatar_url=row.avatar_url
            )
            for row in result.fetchall()
        ]

    @staticmethod
    async def update_profile(
        db: AsyncSession,
        user_id: str,
        update: ProfileUpdateRequest
    ) -> Optional[ProfileResponse]:
        """
        Cập nhật các field được gửi lên (exclude_unset).

        Returns:
            Profile sau khi update, None nếu user không có profile
        """
        changes = update.model_dump(exclude_unset=True)
        if "favorite_genres" in changes:
            changes["favorite_genres"] = json.dumps(changes["favorite_genres"] or [])

        if changes:
            assignments = ", ".join(f"{column} = :{column}" for column in changes)
            changes["updated_at"] = utcnow()
            changes["user_id"] = user_id
            await db.execute(
                text(f"""
                    UPDATE profiles
                    SET {assignments}, updated_at = :updated_at
                    WHERE user_id = :user_id
                """).bindparams(*timestamp_params("updated_at")),
                changes
            )
            await db.commit()
            logger.info(f"Updated profile {user_id}: {sorted(k for k in changes if k not in ('user_id', 'updated_at'))}")

        return await ProfileService.get_profile(db, user_id)

    @staticmethod
    async def search_profiles(
        db: AsyncSession,
        term: str,
        viewer_id: str,
        limit: int = SEARCH_LIMIT
    ) -> List[ProfileSummary]:
        """
        Search theo display_name hoặc email (không phân biệt hoa thường),
        bỏ qua chính viewer. Mỗi kết quả có is_following cho viewer.
        """
        term = term.strip()
        if not term:
            return []

        result = await db.execute(
            text("""
                SELECT user_id, display_name, email, avatar_url
                FROM profiles
                WHERE user_id != :viewer_id
                  AND (LOWER(COALESCE(display_name, '')) LIKE :pattern ESCAPE '\\'
                       OR LOWER(email) LIKE :pattern ESCAPE '\\')
                ORDER BY display_name
                LIMIT :limit
            """),
            {
                "viewer_id": viewer_id,
                "pattern": f"%{_escape_like(term.lower())}%",
                "limit": limit
            }
        )
        rows = result.fetchall()

        following = set(await FollowService.get_following_ids(db, viewer_id))
        return [
            ProfileSummary(
                user_id=row.user_id,
                display_name=row.display_name,
                email=row.email,
                avatar_url=row.avatar_url,
                is_following=row.user_id in following
            )
            for row in rows
        ]

    @staticmethod
    async def get_profile_stats(
        db: AsyncSession,
        user_id: str
    ) -> ProfileStatsResponse:
        followers_count = await FollowService.count_followers(db, user_id)
        following_count = await FollowService.count_following(db, user_id)
        recent_movies = await WatchLogService.list_user_logs(db, user_id, limit=RECENT_MOVIES_LIMIT)

        return ProfileStatsResponse(
            user_id=user_id,
            followers_count=followers_count,
            following_count=following_count,
            recent_movies=recent_movies
        )
