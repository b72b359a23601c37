"""
Redis connection for the site settings cache.

One connection pool is shared by all requests and closed on shutdown.
Connections are opened lazily, so an unreachable server only shows up as
``redis.RedisError`` on the first command; callers treat that as a cache miss.
"""

from collections.abc import AsyncGenerator

import redis.asyncio as redis

from app.config import settings

_pool: redis.ConnectionPool | None = None


def _get_pool() -> redis.ConnectionPool:
    global _pool
    if _pool is None:
        _pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
    return _pool


async def get_redis() -> AsyncGenerator[redis.Redis, None]:  # type: ignore[type-arg]
    client = redis.Redis(connection_pool=_get_pool())
    try:
        yield client
    finally:
        await client.aclose()


async def close_redis_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.aclose()
        _pool = None
