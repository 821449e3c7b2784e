"""
Redis image cache for the Identicon Service.
"""

from typing import Optional

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import RedisError

from shared.logging import get_logger
from shared.errors import CacheReadError, CacheWriteError


def _single_attempt() -> Retry:
    return Retry(NoBackoff(), 0)


def create_pool(
    redis_url: str,
    max_connections: int = 10,
    timeout: Optional[float] = 5.0,
    socket_timeout: Optional[float] = 5.0,
) -> redis.BlockingConnectionPool:
    """Create the bounded connection pool shared by all image cache operations.

    Callers beyond ``max_connections`` wait up to ``timeout`` seconds for a
    connection to be returned instead of failing immediately. Commands are
    attempted once; a failure is reported to the caller as is.
    """
    return redis.BlockingConnectionPool.from_url(
        redis_url,
        max_connections=max_connections,
        timeout=timeout,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
        health_check_interval=30,
        retry=_single_attempt(),
    )


class ImageCache:
    """Key/value store mapping identifiers to image bytes.

    Every operation is a single Redis command. redis-py checks a connection
    out of the pool for the command and releases it in a ``finally`` block,
    so success, failure and cancellation all return the connection.
    """

    def __init__(self, pool: redis.ConnectionPool):
        self.pool = pool
        self.logger = get_logger("identicon.cache.redis")
        self.redis = redis.Redis(connection_pool=pool, retry=_single_attempt())

    async def get(self, identifier: str) -> Optional[bytes]:
        """Read the image stored under ``identifier``, ``None`` when absent."""
        try:
            value = await self.redis.get(identifier)
        except (RedisError, OSError) as e:
            raise CacheReadError(str(e), details={"key": identifier}) from e

        if value is not None and not isinstance(value, (bytes, bytearray)):
            raise CacheReadError(
                "Unexpected value type in image cache",
                details={"key": identifier, "type": type(value).__name__},
            )

        self.logger.debug("Cache lookup", key=identifier, found=bool(value))
        return bytes(value) if value is not None else None

    async def set(self, identifier: str, image: bytes) -> None:
        """Store ``image`` under ``identifier`` without expiry."""
        try:
            accepted = await self.redis.set(identifier, image)
        except (RedisError, OSError) as e:
            raise CacheWriteError(str(e), details={"key": identifier}) from e

        if not accepted:
            raise CacheWriteError("Image cache rejected write", details={"key": identifier})

        self.logger.debug("Cached image", key=identifier, size=len(image))

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self.redis.ping()
            return True
        except (RedisError, OSError):
            return False

    async def close(self):
        """Release pooled connections."""
        await self.redis.aclose()
        await self.pool.disconnect()
        self.logger.info("Redis cache stopped")
