"""
Redis connection and the view cache
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging

import orjson
import redis.asyncio as redis
from redis.exceptions import RedisError

from tourbook.config import settings

logger = logging.getLogger(__name__)

# Redis client instance
redis_client: Optional[redis.Redis] = None


async def init_redis():
    """Connect to Redis. The app still starts when Redis is down."""
    global redis_client
    logger.info("Initializing Redis connection...")
    redis_client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
    try:
        await redis_client.ping()
        logger.info("Redis connection established")
    except RedisError as e:
        logger.warning(f"Redis connection failed: {e}. Category cache disabled.")


async def close_redis():
    global redis_client
    if redis_client:
        logger.info("Closing Redis connection...")
        await redis_client.aclose()
        redis_client = None


class NoOpCache:
    """Stands in for Redis when it is unreachable: never holds anything"""

    async def get(self, key: str) -> None:
        return None

    async def setex(self, key: str, ttl: int, value: Any) -> bool:
        return True

    async def delete(self, *keys: str) -> int:
        return 0

    async def ping(self) -> bool:
        return False


_noop_cache = NoOpCache()


async def get_redis():
    """
    Dependency that provides the Redis client, or a NoOpCache when Redis
    is not connected or stops answering pings.
    """
    if redis_client is None:
        logger.warning("Redis client not initialized, using no-op cache")
        return _noop_cache

    try:
        await redis_client.ping()
        return redis_client
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}, using no-op cache")
        return _noop_cache


Loader = Callable[[], Awaitable[List[Dict[str, Any]]]]


class CacheService:
    """
    Caches lists of serialized documents for the public views.

    Keys are namespaced under CACHE_KEY_PREFIX. A Redis error never fails
    the request: reads fall back to the loader, writes and invalidations
    are logged and skipped.
    """

    def __init__(self, client, prefix: str = settings.CACHE_KEY_PREFIX):
        self.client = client
        self.prefix = prefix

    def key(self, name: str) -> str:
        return f"{self.prefix}:{name}"

    async def get_list(self, name: str) -> Optional[List[Dict[str, Any]]]:
        """The cached list, or None on a miss or an unreadable entry"""
        try:
            raw = await self.client.get(self.key(name))
        except RedisError as e:
            logger.warning(f"Cache read failed for {name}: {e}")
            return None
        if raw is None:
            return None
        try:
            value = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning(f"Discarding unreadable cache entry {name}")
            return None
        return value if isinstance(value, list) else None

    async def set_list(
        self,
        name: str,
        items: List[Dict[str, Any]],
        ttl: int = settings.CACHE_TTL_DEFAULT,
    ) -> None:
        try:
            await self.client.setex(self.key(name), ttl, orjson.dumps(items))
        except RedisError as e:
            logger.warning(f"Cache write failed for {name}: {e}")

    async def get_or_load_list(
        self,
        name: str,
        loader: Loader,
        ttl: int = settings.CACHE_TTL_DEFAULT,
    ) -> List[Dict[str, Any]]:
        """Serve `name` from cache, loading and storing it on a miss"""
        cached = await self.get_list(name)
        if cached is not None:
            logger.debug(f"Cache HIT: {name}")
            return cached

        logger.debug(f"Cache MISS: {name}")
        items = await loader()
        await self.set_list(name, items, ttl)
        return items

    async def invalidate(self, *names: str) -> None:
        if not names:
            return
        try:
            await self.client.delete(*(self.key(name) for name in names))
        except RedisError as e:
            logger.warning(f"Cache invalidation failed for {', '.join(names)}: {e}")
