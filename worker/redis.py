"""Redis connection utilities."""

from redis.asyncio import ConnectionPool, Redis

from api.config import Settings, get_settings

_pools: dict[str, ConnectionPool] = {}


def get_async_redis_pool(settings: Settings | None = None) -> ConnectionPool:
    """Get a shared async connection pool for the configured Redis URL."""
    settings = settings or get_settings()
    if not settings.redis_url:
        raise RuntimeError("REDIS_URL is not configured")

    url = str(settings.redis_url)
    pool = _pools.get(url)
    if pool is None:
        pool = _pools[url] = ConnectionPool.from_url(
            url,
            decode_responses=False,
            max_connections=10,
        )
    return pool


def get_async_redis(settings: Settings | None = None) -> Redis:
    """Get an async Redis client backed by the shared pool."""
    return Redis(connection_pool=get_async_redis_pool(settings))


async def close_redis_pools() -> None:
    """Disconnect every pool created by this module."""
    for pool in _pools.values():
        await pool.disconnect()
    _pools.clear()
