"""
TMDB Cache Service
==================

Cache JSON responses của TMDB trong Redis để giảm số request tới TMDB
(free tier giới hạn số request mỗi ngày).

Redis chỉ giữ short-term state với TTL. Cache là optional: nếu không cấu hình
REDIS_URL hoặc Redis lỗi, mọi lookup đi thẳng tới TMDB.
"""

import hashlib
import json
import logging
from typing import Any, Optional

import redis
import redis.asyncio as aioredis

from watchly.config import settings

logger = logging.getLogger(__name__)


class TMDBCacheService:
    """
    Redis keys:
    - tmdb:{sha1(path + sorted params)} (String, JSON payload)
    """

    def __init__(
        self,
        redis_client: aioredis.Redis,
        ttl_seconds: int = 6 * 60 * 60
    ):
        self.redis_client = redis_client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, redis_url: str, ttl_seconds: int) -> "TMDBCacheService":
        client = aioredis.Redis.from_url(redis_url, decode_responses=True)
        logger.info(f"TMDBCacheService initialized: ttl={ttl_seconds}s")
        return cls(client, ttl_seconds=ttl_seconds)

    @staticmethod
    def make_key(path: str, params: Optional[dict] = None) -> str:
        # api_key không được đưa vào key
        items = sorted((k, str(v)) for k, v in (params or {}).items() if k != "api_key")
        raw = path + "?" + "&".join(f"{k}={v}" for k, v in items)
        return "tmdb:" + hashlib.sha1(raw.encode("utf-8")).hexdigest()

    async def get_json(self, key: str) -> Optional[Any]:
        """Trả về payload đã cache, None nếu miss hoặc Redis lỗi."""
        try:
            raw = await self.redis_client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis error reading {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Discarding corrupt cache entry {key}")
            return None

    async def set_json(self, key: str, value: Any) -> bool:
        """
        Ghi payload vào cache với TTL.

        Returns:
            True nếu thành công, False nếu Redis lỗi
        """
        try:
            await self.redis_client.set(key, json.dumps(value), ex=self.ttl_seconds)
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis error writing {key}: {e}")
            return False

    async def close(self) -> None:
        await self.redis_client.aclose()


# Singleton instance
_tmdb_cache_service_instance: Optional[TMDBCacheService] = None


def get_tmdb_cache_service() -> Optional[TMDBCacheService]:
    """
    Get singleton instance của TMDBCacheService.

    Returns:
        TMDBCacheService, hoặc None nếu REDIS_URL chưa được cấu hình
    """
    global _tmdb_cache_service_instance

    if not settings.redis_url:
        return None

    if _tmdb_cache_service_instance is None:
        _tmdb_cache_service_instance = TMDBCacheService.from_url(
            settings.redis_url,
            ttl_seconds=settings.tmdb_cache_ttl_seconds
        )

    return _tmdb_cache_service_instance


async def close_tmdb_cache_service() -> None:
    """Đóng Redis connection pool khi app shutdown."""
    global _tmdb_cache_service_instance

    if _tmdb_cache_service_instance is not None:
        await _tmdb_cache_service_instance.close()
        _tmdb_cache_service_instance = None
