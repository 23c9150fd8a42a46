"""Usage policy: monthly quotas, sliding-window rate limits and privilege bypass.

The engine calls ``admit`` once per analysis. Admission is an atomic
increment-and-check under the store's per-user lock, so concurrent requests
for one user are serialized and at most the plan's allowance gets through.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from api.config import Settings
from api.exceptions import QuotaExceededError, RateLimitError
from worker.usage.models import (
    ANALYSIS_BASE_COST,
    PLAN_LIMITS,
    RATE_LIMITS,
    LimitCheck,
    UsageRecord,
    next_period_start,
)
from worker.usage.store import UsageStore, build_usage_store

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Identity:
    """The caller an analysis runs for."""

    user_id: str
    plan: str
    email: str = ""
    is_admin: bool = False


class UsagePolicy:
    """Per-user quota and rate bookkeeping over a UsageStore."""

    def __init__(
        self,
        store: UsageStore,
        privileged_emails: frozenset[str] = frozenset(),
        window_seconds: float = 60.0,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.privileged_emails = frozenset(e.lower() for e in privileged_emails)
        self.window_seconds = window_seconds
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, store: UsageStore | None = None) -> "UsagePolicy":
        return cls(
            store=store or build_usage_store(settings),
            privileged_emails=settings.privileged_emails,
            window_seconds=settings.rate_limit_window_seconds,
        )

    def is_privileged(self, identity: Identity) -> bool:
        """Admins and configured admin/demo e-mails bypass every limit."""
        if identity.is_admin:
            return True
        return bool(identity.email) and identity.email.lower() in self.privileged_emails

    async def _current_record(self, user_id: str, now: datetime) -> UsageRecord:
        record = await self.store.load(user_id)
        if record is None:
            return UsageRecord.empty(user_id, now)
        if record.roll_period(now):
            logger.info("usage_period_rolled_over", user_id=user_id, period=record.period_start)
        return record

    def _evaluate_usage(self, record: UsageRecord, plan: str) -> LimitCheck:
        limits = PLAN_LIMITS.get(plan)
        if limits is None:
            return LimitCheck(allowed=False, reason="Invalid plan", current=record)

        reset_time = next_period_start(record.period_start)
        if limits.analyses is not None and record.analyses >= limits.analyses:
            return LimitCheck(
                allowed=False,
                reason=(
                    f"Monthly analysis limit reached ({limits.analyses}). Upgrade your "
                    "plan or wait for the next billing cycle."
                ),
                reset_time=reset_time,
                current=record,
            )
        if limits.budget is not None and record.cost + ANALYSIS_BASE_COST > limits.budget:
            return LimitCheck(
                allowed=False,
                reason=(
                    f"Monthly budget limit would be exceeded (${limits.budget:.2f}). "
                    "Upgrade your plan for higher limits."
                ),
                reset_time=reset_time,
                current=record,
            )
        return LimitCheck(allowed=True, reset_time=reset_time, current=record)

    def _evaluate_rate(self, record: UsageRecord, plan: str, now_ts: float) -> LimitCheck:
        max_requests = RATE_LIMITS.get(plan)
        if max_requests is None:
            return LimitCheck(allowed=False, reason="Invalid plan", current=record)

        record.prune_requests(now_ts, self.window_seconds)
        if len(record.request_times) >= max_requests:
            oldest = min(record.request_times)
            return LimitCheck(
                allowed=False,
                reason=(
                    f"Rate limit exceeded: {max_requests} requests per "
                    f"{self.window_seconds:g} seconds. Please try again later."
                ),
                reset_time=datetime.fromtimestamp(oldest + self.window_seconds, UTC),
                current=record,
            )
        return LimitCheck(allowed=True, current=record)

    async def check_usage_limits(self, user_id: str, plan: str) -> LimitCheck:
        """Whether the user may start another analysis this period."""
        now = self.clock()
        async with self.store.lock(user_id):
            record = await self._current_record(user_id, now)
        return self._evaluate_usage(record, plan)

    async def check_rate_limit(self, user_id: str, plan: str) -> LimitCheck:
        """Whether the user's request window has room for one more request."""
        now = self.clock()
        async with self.store.lock(user_id):
            record = await self._current_record(user_id, now)
        return self._evaluate_rate(record, plan, now.timestamp())

    async def record_request(self, user_id: str) -> None:
        """Append a request to the user's window, pruning expired entries."""
        now = self.clock()
        async with self.store.lock(user_id):
            record = await self._current_record(user_id, now)
            record.request_times.append(now.timestamp())
            record.prune_requests(now.timestamp(), self.window_seconds)
            await self.store.save(record)

    async def record_cost(self, user_id: str, cost: float, tokens: int = 0) -> None:
        """Accrue what an analysis actually cost."""
        now = self.clock()
        async with self.store.lock(user_id):
            record = await self._current_record(user_id, now)
            record.cost += cost
            record.tokens += tokens
            await self.store.save(record)

    async def admit(self, identity: Identity) -> UsageRecord:
        """Check both limits and count the analysis, atomically per user.

        Raises QuotaExceededError or RateLimitError when the identity is not
        privileged and a limit is hit. Nothing is recorded on refusal.
        """
        now = self.clock()
        privileged = self.is_privileged(identity)

        async with self.store.lock(identity.user_id):
            record = await self._current_record(identity.user_id, now)

            if not privileged:
                usage = self._evaluate_usage(record, identity.plan)
                if not usage.allowed:
                    logger.info(
                        "analysis_refused_quota",
                        user_id=identity.user_id,
                        plan=identity.plan,
                        reason=usage.reason,
                    )
                    raise QuotaExceededError(
                        usage.reason or "Usage limit exceeded",
                        reset_time=usage.reset_time,
                    )

                rate = self._evaluate_rate(record, identity.plan, now.timestamp())
                if not rate.allowed:
                    logger.info(
                        "analysis_refused_rate_limit",
                        user_id=identity.user_id,
                        plan=identity.plan,
                        requests_in_window=len(record.request_times),
                    )
                    raise RateLimitError(
                        rate.reason or "Rate limit exceeded",
                        reset_time=rate.reset_time,
                    )

            record.request_times.append(now.timestamp())
            record.prune_requests(now.timestamp(), self.window_seconds)
            record.analyses += 1
            await self.store.save(record)

        logger.debug(
            "analysis_admitted",
            user_id=identity.user_id,
            plan=identity.plan,
            privileged=privileged,
            analyses=record.analyses,
        )
        return record

    async def get_usage(self, identity: Identity) -> dict:
        """Usage summary for the current period."""
        now = self.clock()
        async with self.store.lock(identity.user_id):
            record = await self._current_record(identity.user_id, now)
        record.prune_requests(now.timestamp(), self.window_seconds)

        limits = PLAN_LIMITS.get(identity.plan)
        return {
            "plan": identity.plan,
            "privileged": self.is_privileged(identity),
            "monthly_analyses": limits.analyses if limits else 0,
            "monthly_budget": limits.budget if limits else 0.0,
            "current_usage": {
                "analyses": record.analyses,
                "cost": round(record.cost, 3),
                "tokens": record.tokens,
            },
            "requests_in_window": len(record.request_times),
            "rate_limit": RATE_LIMITS.get(identity.plan, 0),
            "period_start": record.period_start.isoformat(),
            "reset_date": next_period_start(record.period_start).isoformat(),
        }
