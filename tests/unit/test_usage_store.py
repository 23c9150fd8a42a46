"""Tests for usage records and stores."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import orjson
import pytest

from api.config import Settings
from worker.usage.models import (
    PLAN_LIMITS,
    UsageRecord,
    next_period_start,
    period_start_for,
)
from worker.usage.store import (
    USAGE_TTL_SECONDS,
    InMemoryUsageStore,
    RedisUsageStore,
    build_usage_store,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


class TestUsageRecord:
    """Tests for UsageRecord."""

    def test_period_start(self) -> None:
        assert period_start_for(NOW) == datetime(2026, 3, 1, tzinfo=UTC)
        assert next_period_start(datetime(2026, 3, 1, tzinfo=UTC)) == datetime(
            2026, 4, 1, tzinfo=UTC
        )

    def test_roll_period_same_month(self) -> None:
        record = UsageRecord.empty("u", NOW)
        record.analyses = 4

        assert record.roll_period(NOW.replace(day=30)) is False
        assert record.analyses == 4

    def test_roll_period_keeps_window(self) -> None:
        record = UsageRecord(
            user_id="u",
            period_start=datetime(2026, 2, 1, tzinfo=UTC),
            analyses=9,
            cost=1.5,
            tokens=100,
            request_times=[NOW.timestamp() - 5],
        )

        assert record.roll_period(NOW) is True
        assert (record.analyses, record.cost, record.tokens) == (0, 0.0, 0)
        assert len(record.request_times) == 1

    def test_prune_requests(self) -> None:
        record = UsageRecord.empty("u", NOW)
        now_ts = NOW.timestamp()
        record.request_times = [now_ts - 90, now_ts - 60, now_ts - 59, now_ts]

        record.prune_requests(now_ts, 60)

        assert record.request_times == [now_ts - 59, now_ts]

    def test_dict_round_trip(self) -> None:
        record = UsageRecord("u", period_start_for(NOW), 2, 0.4, 900, [1.0, 2.0])

        assert UsageRecord.from_dict(record.to_dict()) == record

    def test_plan_limits(self) -> None:
        assert PLAN_LIMITS["free"].unlimited
        assert not PLAN_LIMITS["starter"].unlimited


class TestInMemoryUsageStore:
    """Tests for InMemoryUsageStore."""

    @pytest.mark.asyncio
    async def test_load_missing(self) -> None:
        assert await InMemoryUsageStore().load("nobody") is None

    @pytest.mark.asyncio
    async def test_loaded_records_are_copies(self) -> None:
        store = InMemoryUsageStore()
        await store.save(UsageRecord.empty("u", NOW))

        record = await store.load("u")
        record.analyses = 99

        assert (await store.load("u")).analyses == 0

    def test_lock_per_user(self) -> None:
        store = InMemoryUsageStore()

        assert store.lock("a") is store.lock("a")
        assert store.lock("a") is not store.lock("b")


class TestRedisUsageStore:
    """Tests for RedisUsageStore against a mocked client."""

    @pytest.mark.asyncio
    async def test_save_sets_blob_with_ttl(self) -> None:
        redis = MagicMock()
        redis.set = AsyncMock()
        store = RedisUsageStore(redis, key_prefix="test:usage")
        record = UsageRecord.empty("u", NOW)

        await store.save(record)

        redis.set.assert_awaited_once_with(
            "test:usage:u", orjson.dumps(record.to_dict()), ex=USAGE_TTL_SECONDS
        )

    @pytest.mark.asyncio
    async def test_load(self) -> None:
        record = UsageRecord("u", period_start_for(NOW), 3, 0.6, 10, [])
        redis = MagicMock()
        redis.get = AsyncMock(return_value=orjson.dumps(record.to_dict()))

        loaded = await RedisUsageStore(redis, key_prefix="test:usage").load("u")

        assert loaded == record
        redis.get.assert_awaited_once_with("test:usage:u")

    @pytest.mark.asyncio
    async def test_load_missing(self) -> None:
        redis = MagicMock()
        redis.get = AsyncMock(return_value=None)

        assert await RedisUsageStore(redis).load("u") is None

    def test_lock_key(self) -> None:
        redis = MagicMock()

        RedisUsageStore(redis, key_prefix="test:usage").lock("u")

        assert redis.lock.call_args.args == ("test:usage:u:lock",)


class TestBuildUsageStore:
    """Tests for store selection."""

    def test_memory_without_redis(self) -> None:
        store = build_usage_store(Settings(redis_url=None))

        assert isinstance(store, InMemoryUsageStore)

    def test_redis_when_configured(self) -> None:
        store = build_usage_store(
            Settings(redis_url="redis://localhost:6379/0", usage_key_prefix="x:usage")
        )

        assert isinstance(store, RedisUsageStore)
        assert store.key_prefix == "x:usage"
