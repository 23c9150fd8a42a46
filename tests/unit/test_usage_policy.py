"""Tests for usage limits, rate limiting and privilege bypass."""

import asyncio
from datetime import UTC, datetime

import pytest

from api.exceptions import QuotaExceededError, RateLimitError
from tests.fixtures import FakeClock, make_identity
from worker.usage.policy import UsagePolicy
from worker.usage.store import InMemoryUsageStore


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def clocked_policy(clock: FakeClock) -> UsagePolicy:
    return UsagePolicy(
        InMemoryUsageStore(),
        privileged_emails=frozenset({"Demo@Example.com"}),
        window_seconds=60.0,
        clock=clock,
    )


class TestRateLimit:
    """Tests for the sliding request window."""

    @pytest.mark.asyncio
    async def test_burst_over_limit_refused(self, clocked_policy: UsagePolicy) -> None:
        """The professional plan allows 20 requests per window, the 21st is refused."""
        identity = make_identity("professional")
        for _ in range(20):
            await clocked_policy.admit(identity)

        with pytest.raises(RateLimitError) as exc_info:
            await clocked_policy.admit(identity)

        error = exc_info.value
        assert error.code == "rate_limited"
        assert error.status_code == 429
        assert "20 requests per 60 seconds" in error.reason
        assert error.reset_time == datetime(2026, 3, 15, 12, 1, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_refusal_records_nothing(self, clocked_policy: UsagePolicy) -> None:
        identity = make_identity("free")
        for _ in range(3):
            await clocked_policy.admit(identity)
        with pytest.raises(RateLimitError):
            await clocked_policy.admit(identity)

        usage = await clocked_policy.get_usage(identity)

        assert usage["current_usage"]["analyses"] == 3
        assert usage["requests_in_window"] == 3

    @pytest.mark.asyncio
    async def test_window_expires(self, clocked_policy: UsagePolicy, clock: FakeClock) -> None:
        identity = make_identity("free")
        for _ in range(3):
            await clocked_policy.admit(identity)

        clock.advance(seconds=60)

        await clocked_policy.admit(identity)

    @pytest.mark.asyncio
    async def test_window_slides(self, clocked_policy: UsagePolicy, clock: FakeClock) -> None:
        """Requests leave the window one by one as they age out."""
        identity = make_identity("free")
        for _ in range(3):
            await clocked_policy.admit(identity)
            clock.advance(seconds=20)

        # Oldest request is now exactly 60 seconds old
        await clocked_policy.admit(identity)
        with pytest.raises(RateLimitError):
            await clocked_policy.admit(identity)

    @pytest.mark.asyncio
    async def test_concurrent_admits_respect_limit(self, clocked_policy: UsagePolicy) -> None:
        """Concurrent requests for one user let exactly the allowance through."""
        identity = make_identity("professional")

        outcomes = await asyncio.gather(
            *(clocked_policy.admit(identity) for _ in range(25)),
            return_exceptions=True,
        )

        refused = [o for o in outcomes if isinstance(o, RateLimitError)]
        assert len(refused) == 5
        assert len(outcomes) - len(refused) == 20

    @pytest.mark.asyncio
    async def test_users_are_independent(self, clocked_policy: UsagePolicy) -> None:
        for _ in range(3):
            await clocked_policy.admit(make_identity("free", user_id="a"))

        await clocked_policy.admit(make_identity("free", user_id="b"))

    @pytest.mark.asyncio
    async def test_check_rate_limit_is_read_only(self, clocked_policy: UsagePolicy) -> None:
        for _ in range(3):
            check = await clocked_policy.check_rate_limit("user-1", "free")
            assert check.allowed
            await clocked_policy.record_request("user-1")

        check = await clocked_policy.check_rate_limit("user-1", "free")

        assert not check.allowed
        assert check.to_dict()["reset_time"] == "2026-03-15T12:01:00+00:00"


class TestUsageLimits:
    """Tests for monthly quotas."""

    @pytest.mark.asyncio
    async def test_monthly_analysis_limit(
        self, clocked_policy: UsagePolicy, clock: FakeClock
    ) -> None:
        identity = make_identity("starter")
        for _ in range(10):
            await clocked_policy.admit(identity)
            clock.advance(seconds=61)

        with pytest.raises(QuotaExceededError) as exc_info:
            await clocked_policy.admit(identity)

        error = exc_info.value
        assert error.code == "quota_exceeded"
        assert "Monthly analysis limit reached (10)" in error.reason
        assert error.reset_time == datetime(2026, 4, 1, tzinfo=UTC)
        assert error.details["reset_time"] == "2026-04-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_budget_limit(self, clocked_policy: UsagePolicy) -> None:
        """Accrued cost plus the base cost of one analysis may not pass the budget."""
        identity = make_identity("starter")
        await clocked_policy.record_cost(identity.user_id, 1.85, tokens=1000)

        with pytest.raises(QuotaExceededError, match=r"budget limit would be exceeded \(\$2.00\)"):
            await clocked_policy.admit(identity)

    @pytest.mark.asyncio
    async def test_budget_with_room(self, clocked_policy: UsagePolicy) -> None:
        identity = make_identity("starter")
        await clocked_policy.record_cost(identity.user_id, 1.5)

        await clocked_policy.admit(identity)

    @pytest.mark.asyncio
    async def test_rollover_resets_counters(
        self, clocked_policy: UsagePolicy, clock: FakeClock
    ) -> None:
        identity = make_identity("starter")
        for _ in range(10):
            await clocked_policy.admit(identity)
            clock.advance(seconds=61)
        await clocked_policy.record_cost(identity.user_id, 1.9)

        clock.now = datetime(2026, 4, 1, 0, 0, 1, tzinfo=UTC)
        record = await clocked_policy.admit(identity)

        assert record.analyses == 1
        assert record.cost == 0.0
        assert record.period_start == datetime(2026, 4, 1, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_december_rolls_into_january(self, clock: FakeClock) -> None:
        clock.now = datetime(2026, 12, 31, 23, 0, tzinfo=UTC)
        policy = UsagePolicy(InMemoryUsageStore(), clock=clock)

        usage = await policy.get_usage(make_identity("starter"))

        assert usage["reset_date"] == "2027-01-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_unlimited_plans(self, clocked_policy: UsagePolicy) -> None:
        check = await clocked_policy.check_usage_limits("user-1", "free")

        assert check.allowed

    @pytest.mark.asyncio
    async def test_invalid_plan(self, clocked_policy: UsagePolicy) -> None:
        with pytest.raises(QuotaExceededError, match="Invalid plan"):
            await clocked_policy.admit(make_identity("platinum"))


class TestPrivilegedIdentities:
    """Tests for the admin/demo bypass."""

    @pytest.mark.asyncio
    async def test_admin_bypasses_rate_limit(self, clocked_policy: UsagePolicy) -> None:
        identity = make_identity("free", is_admin=True)

        for _ in range(10):
            await clocked_policy.admit(identity)

    @pytest.mark.asyncio
    async def test_demo_email_bypasses_quota(
        self, clocked_policy: UsagePolicy, clock: FakeClock
    ) -> None:
        """E-mails match case-insensitively."""
        identity = make_identity("starter", email="demo@EXAMPLE.com")
        await clocked_policy.record_cost(identity.user_id, 50.0)

        record = await clocked_policy.admit(identity)

        assert record.analyses == 1

    @pytest.mark.asyncio
    async def test_privileged_with_unknown_plan(self, clocked_policy: UsagePolicy) -> None:
        await clocked_policy.admit(make_identity("internal", is_admin=True))

    def test_is_privileged(self, clocked_policy: UsagePolicy) -> None:
        assert clocked_policy.is_privileged(make_identity(email="demo@example.com"))
        assert not clocked_policy.is_privileged(make_identity(email="someone@example.com"))
        assert not clocked_policy.is_privileged(make_identity(email=""))


class TestGetUsage:
    """Tests for the usage summary."""

    @pytest.mark.asyncio
    async def test_summary(self, clocked_policy: UsagePolicy) -> None:
        identity = make_identity("professional")
        await clocked_policy.admit(identity)
        await clocked_policy.record_cost(identity.user_id, 0.1234, tokens=4300)

        usage = await clocked_policy.get_usage(identity)

        assert usage == {
            "plan": "professional",
            "privileged": False,
            "monthly_analyses": 50,
            "monthly_budget": 10.0,
            "current_usage": {"analyses": 1, "cost": 0.123, "tokens": 4300},
            "requests_in_window": 1,
            "rate_limit": 20,
            "period_start": "2026-03-01T00:00:00+00:00",
            "reset_date": "2026-04-01T00:00:00+00:00",
        }

    @pytest.mark.asyncio
    async def test_unlimited_plan_summary(self, clocked_policy: UsagePolicy) -> None:
        usage = await clocked_policy.get_usage(make_identity("free"))

        assert usage["monthly_analyses"] is None
        assert usage["monthly_budget"] is None
