"""Redis client and per-user locking."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import uuid4

from redis.asyncio import ConnectionPool, Redis

from app.config import get_settings
from app.logging_config import get_logger

settings = get_settings()
logger = get_logger(__name__)

# Global Redis connection pool and client instance
redis_pool: ConnectionPool | None = None
redis_client: Redis | None = None


async def init_redis() -> Redis:
    """Initialize the Redis connection pool and client."""
    global redis_pool, redis_client

    redis_pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        retry_on_timeout=True,
        encoding="utf-8",
        decode_responses=True,
    )
    redis_client = Redis(connection_pool=redis_pool)

    # Test connection
    await redis_client.ping()
    return redis_client


async def close_redis() -> None:
    """Close Redis connection and pool."""
    global redis_pool, redis_client
    if redis_client:
        await redis_client.close()
        redis_client = None
    if redis_pool:
        await redis_pool.disconnect()
        redis_pool = None


def get_redis() -> Redis | None:
    """Current Redis client, None before init_redis()."""
    return redis_client


class UserLock:
    """Short-lived exclusive lock per user.

    SET NX EX acquires; release deletes the key only if this holder still
    owns it, so an expired-and-retaken lock is never released by the
    previous holder.
    """

    # Compare-and-delete on the owner token
    RELEASE_LOCK_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, client: Redis, prefix: str, ttl_seconds: int):
        self.client = client
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds

    def key(self, user_id: str) -> str:
        return f"{self.prefix}{user_id}"

    async def acquire(self, user_id: str) -> str | None:
        """Try once; return the owner token, or None if already held."""
        token = uuid4().hex
        acquired = await self.client.set(
            self.key(user_id),
            token,
            nx=True,
            ex=self.ttl_seconds,
        )
        return token if acquired else None

    async def release(self, user_id: str, token: str) -> bool:
        released = await self.client.eval(
            self.RELEASE_LOCK_SCRIPT,
            1,
            self.key(user_id),
            token,
        )
        if not released:
            logger.warning("user_lock_expired_before_release", key=self.key(user_id))
        return bool(released)

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncGenerator[bool, None]:
        """Yield True while holding the lock, False if it was busy."""
        token = await self.acquire(user_id)
        if token is None:
            yield False
            return
        try:
            yield True
        finally:
            await self.release(user_id, token)
