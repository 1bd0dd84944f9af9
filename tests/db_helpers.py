"""
Helpers để chạy tests trên một SQLite database tạm (file, NullPool).

Mỗi session mở connection mới trong event loop hiện tại, nên cùng một
engine dùng được cả từ asyncio.run() lẫn từ TestClient.
"""

import asyncio
import os
import tempfile

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from watchly.db.init_db import init_db


class TempDatabase:
    def __init__(self):
        fd, self.path = tempfile.mkstemp(suffix=".sqlite3")
        os.close(fd)
        self.engine = create_async_engine(f"sqlite+aiosqlite:///{self.path}", poolclass=NullPool)
        self.sessionmaker = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    async def create_schema(self):
        await init_db(self.engine)

    async def get_db(self):
        async with self.sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self):
        await self.engine.dispose()

    def remove(self):
        if os.path.exists(self.path):
            os.remove(self.path)


def create_temp_database() -> TempDatabase:
    """Tạo database tạm đã có schema (dùng từ code sync)."""
    db = TempDatabase()
    asyncio.run(db.create_schema())
    return db


def drop_temp_database(db: TempDatabase) -> None:
    asyncio.run(db.dispose())
    db.remove()
