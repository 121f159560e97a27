"""Redis client used as the change-feed transport.

Redis is optional. Without it, writes still succeed and the change feed is
simply not published; subscribers report an ``error`` connection state and
consumers fall back to snapshot reads.
"""

from dataclasses import dataclass

from redis.asyncio import ConnectionPool, Redis

from src.safeops.core.config import get_settings
from src.safeops.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _RedisState:
    """Process-wide connection. One connect attempt until ``clear()``."""

    client: Redis | None = None
    pool: ConnectionPool | None = None
    attempted: bool = False

    async def release(self) -> None:
        if self.client is not None:
            await self.client.aclose()
        if self.pool is not None:
            await self.pool.disconnect()
        self.clear()

    def clear(self) -> None:
        self.client = None
        self.pool = None
        self.attempted = False


_state = _RedisState()


async def _connect(url: str, pool_size: int) -> Redis | None:
    _state.pool = ConnectionPool.from_url(url, max_connections=pool_size, decode_responses=True)
    _state.client = Redis(connection_pool=_state.pool)
    try:
        await _state.client.ping()  # type: ignore[misc]
    except Exception as e:
        logger.warning("Redis unreachable, change feed disabled", error=str(e))
        await _state.release()
        _state.attempted = True
        return None
    logger.info("Redis connected", max_connections=pool_size)
    return _state.client


async def get_redis() -> Redis | None:
    """Shared client, or None when Redis is unset or unreachable.

    Connects lazily on first call. A failed attempt sticks until
    ``close_redis`` or ``reset_redis_state``.
    """
    if _state.client is not None:
        return _state.client
    if _state.attempted:
        return None

    _state.attempted = True
    settings = get_settings()
    if not settings.redis_url:
        logger.info("REDIS_URL not set, change feed disabled")
        return None
    return await _connect(settings.redis_url, settings.redis_pool_size)


async def redis_status() -> str:
    """Health label: ``not_configured``, ``healthy`` or ``unhealthy: <reason>``."""
    client = await get_redis()
    if client is None:
        return "not_configured" if not get_settings().redis_url else "unhealthy: unreachable"
    try:
        await client.ping()  # type: ignore[misc]
    except Exception as e:
        return f"unhealthy: {e}"
    return "healthy"


async def close_redis() -> None:
    """Drop the pool on shutdown; the next ``get_redis`` reconnects."""
    if _state.client is not None:
        logger.info("Closing Redis connection")
    await _state.release()


def reset_redis_state() -> None:
    """Forget the connection without closing it (tests)."""
    _state.clear()
