"""Usage record stores.

Every read-modify-write of a record happens inside ``lock(user_id)`` so two
concurrent requests for the same user cannot both pass a limit that only one
should pass.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

import orjson
import structlog
from redis.asyncio import Redis

from api.config import Settings
from worker.redis import get_async_redis
from worker.usage.models import UsageRecord

logger = structlog.get_logger(__name__)

# Records outlive a month so the rollover can see the previous period
USAGE_TTL_SECONDS = 60 * 60 * 24 * 40
LOCK_TIMEOUT_SECONDS = 10.0
LOCK_BLOCKING_TIMEOUT_SECONDS = 5.0


class UsageStore(ABC):
    """Key-value store of usage records with a per-user lock."""

    @abstractmethod
    def lock(self, user_id: str) -> AbstractAsyncContextManager:
        """Exclusive lock over one user's record."""
        ...

    @abstractmethod
    async def load(self, user_id: str) -> UsageRecord | None: ...

    @abstractmethod
    async def save(self, record: UsageRecord) -> None: ...


class InMemoryUsageStore(UsageStore):
    """Process-local store, one asyncio.Lock per user."""

    def __init__(self) -> None:
        self._records: dict[str, dict] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def lock(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    async def load(self, user_id: str) -> UsageRecord | None:
        data = self._records.get(user_id)
        # Returned records are copies; changes persist only through save()
        return UsageRecord.from_dict(data) if data is not None else None

    async def save(self, record: UsageRecord) -> None:
        self._records[record.user_id] = record.to_dict()

    def clear(self) -> None:
        self._records.clear()
        self._locks.clear()


class RedisUsageStore(UsageStore):
    """Redis-backed store: one JSON blob per user, guarded by a Redis lock."""

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "discoverability:usage",
        ttl_seconds: int = USAGE_TTL_SECONDS,
    ):
        self.redis = redis
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, user_id: str) -> str:
        return f"{self.key_prefix}:{user_id}"

    def lock(self, user_id: str) -> AbstractAsyncContextManager:
        return self.redis.lock(
            f"{self._key(user_id)}:lock",
            timeout=LOCK_TIMEOUT_SECONDS,
            blocking_timeout=LOCK_BLOCKING_TIMEOUT_SECONDS,
        )

    async def load(self, user_id: str) -> UsageRecord | None:
        raw = await self.redis.get(self._key(user_id))
        if raw is None:
            return None
        return UsageRecord.from_dict(orjson.loads(raw))

    async def save(self, record: UsageRecord) -> None:
        await self.redis.set(
            self._key(record.user_id),
            orjson.dumps(record.to_dict()),
            ex=self.ttl_seconds,
        )


def build_usage_store(settings: Settings) -> UsageStore:
    """Redis store when ``redis_url`` is configured, otherwise in-memory."""
    if settings.redis_url:
        logger.info("usage_store_selected", backend="redis")
        return RedisUsageStore(get_async_redis(settings), key_prefix=settings.usage_key_prefix)

    logger.info("usage_store_selected", backend="memory")
    return InMemoryUsageStore()
