"""
Module khởi tạo database schema cho Watchly.

Chức năng:
- Khai báo tables (users, profiles, follows, watch_logs) bằng SQLAlchemy Core
- Tạo tables nếu chưa tồn tại (PostgreSQL hoặc SQLite)

Chạy script:
    python -m watchly.db.init_db
"""

import asyncio
import logging

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("last_login", DateTime(timezone=True), nullable=True),
)

profiles = Table(
    "profiles",
    metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("display_name", String(100), nullable=True),
    Column("email", String(255), nullable=False),
    Column("bio", Text, nullable=True),
    Column("avatar_url", Text, nullable=True),
    # JSON array, stored as text so the schema stays portable
    Column("favorite_genres", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

follows = Table(
    "follows",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("follower_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("following_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
)

watch_logs = Table(
    "watch_logs",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("title", Text, nullable=False),
    Column("caption", Text, nullable=True),
    Column("emoji", String(32), nullable=True),
    Column("image_url", Text, nullable=True),
    Column("is_post", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

Index("ix_follows_following_id", follows.c.following_id)
Index("ix_watch_logs_user_created", watch_logs.c.user_id, watch_logs.c.created_at)


async def init_db(engine: AsyncEngine) -> None:
    """Tạo tất cả tables nếu chưa tồn tại."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info(f"✅ Database schema ready ({len(metadata.tables)} tables)")


async def main() -> None:
    from watchly.web.utils.database import get_engine

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    engine = get_engine()
    try:
        await init_db(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
