"""
Database connection utilities for async SQLAlchemy.
"""
import logging
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy import DateTime, bindparam
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from watchly.config import settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_params(*names: str) -> list:
    """Typed bind params để asyncpg/aiosqlite nhận datetime đúng kiểu."""
    return [bindparam(name, type_=DateTime(timezone=True)) for name in names]


def normalize_database_url(url: str) -> str:
    """
    Chuẩn hóa database URL sang async driver:
    - postgresql:// / postgres:// -> postgresql+asyncpg://
    - sqlite:// -> sqlite+aiosqlite://
    """
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    if url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    if url.startswith("sqlite://") and "+aiosqlite" not in url:
        url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    return url


def mask_url(url: str) -> str:
    """Mask password trong database URL để log."""
    if '@' in url:
        parts = url.split('@')
        user_pass = parts[0].split('//')[1] if '//' in parts[0] else parts[0]
        if ':' in user_pass:
            user = user_pass.split(':')[0]
            return url.replace(user_pass, f"{user}:***")
    return url


def create_engine_for_url(url: str) -> AsyncEngine:
    """
    Tạo async engine cho URL đã cho.

    Pool settings chỉ áp dụng cho PostgreSQL; SQLite dùng pool mặc định.
    """
    url = normalize_database_url(url)
    logger.info(f"🔗 Database URL: {mask_url(url)}")

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)

    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,  # Kiểm tra connection trước khi dùng
        pool_size=10,
        max_overflow=20,
        pool_recycle=3600,  # Recycle connections sau 1 giờ để tránh stale connections
        pool_timeout=30,
        connect_args={
            "command_timeout": 60,
            "server_settings": {
                "application_name": "watchly_api"
            }
        }
    )


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Process-wide engine, tạo lần đầu khi được dùng."""
    try:
        engine = create_engine_for_url(settings.database_url)
        logger.info("✅ Database engine created successfully")
        return engine
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")
        logger.error("Please check DATABASE_URL and that the database server is running")
        raise


@lru_cache(maxsize=1)
def get_sessionmaker() -> async_sessionmaker:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def get_db() -> AsyncSession:
    """
    Dependency để lấy database session.
    Sử dụng trong FastAPI routes.

    Commit nếu request thành công, rollback nếu có exception.
    """
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
