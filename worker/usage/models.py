"""Usage bookkeeping models: plan limits and the per-user usage record."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

# Budget reserved for one analysis when checking the monthly budget
ANALYSIS_BASE_COST = 0.20

# Plans that run real analyses against the crawl/citation services
REAL_ANALYSIS_PLANS = frozenset({"starter", "professional", "enterprise"})


@dataclass(frozen=True)
class PlanLimits:
    """Monthly allowance for one plan. ``None`` means unlimited."""

    analyses: int | None
    budget: float | None

    @property
    def unlimited(self) -> bool:
        return self.analyses is None and self.budget is None


PLAN_LIMITS: dict[str, PlanLimits] = {
    "free": PlanLimits(analyses=None, budget=None),
    "trial": PlanLimits(analyses=None, budget=None),
    "starter": PlanLimits(analyses=10, budget=2.00),
    "professional": PlanLimits(analyses=50, budget=10.00),
    "enterprise": PlanLimits(analyses=1000, budget=200.00),
}

# Requests allowed per sliding rate-limit window
RATE_LIMITS: dict[str, int] = {
    "free": 3,
    "trial": 3,
    "starter": 10,
    "professional": 20,
    "enterprise": 40,
}


def period_start_for(now: datetime) -> datetime:
    """First instant of the UTC month containing ``now``."""
    now = now.astimezone(UTC)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def next_period_start(period_start: datetime) -> datetime:
    if period_start.month == 12:
        return period_start.replace(year=period_start.year + 1, month=1)
    return period_start.replace(month=period_start.month + 1)


@dataclass
class UsageRecord:
    """Per-user counters for the current period plus the request window."""

    user_id: str
    period_start: datetime
    analyses: int = 0
    cost: float = 0.0
    tokens: int = 0
    request_times: list[float] = field(default_factory=list)  # Epoch seconds

    @classmethod
    def empty(cls, user_id: str, now: datetime) -> "UsageRecord":
        return cls(user_id=user_id, period_start=period_start_for(now))

    def roll_period(self, now: datetime) -> bool:
        """Reset the monthly counters if ``now`` is in a later month.

        The request window is kept. Returns True when a rollover happened.
        """
        current = period_start_for(now)
        if current == self.period_start:
            return False
        self.period_start = current
        self.analyses = 0
        self.cost = 0.0
        self.tokens = 0
        return True

    def prune_requests(self, now_ts: float, window_seconds: float) -> None:
        cutoff = now_ts - window_seconds
        self.request_times = [t for t in self.request_times if t > cutoff]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "period_start": self.period_start.isoformat(),
            "analyses": self.analyses,
            "cost": self.cost,
            "tokens": self.tokens,
            "request_times": list(self.request_times),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UsageRecord":
        return cls(
            user_id=data["user_id"],
            period_start=datetime.fromisoformat(data["period_start"]),
            analyses=int(data.get("analyses", 0)),
            cost=float(data.get("cost", 0.0)),
            tokens=int(data.get("tokens", 0)),
            request_times=[float(t) for t in data.get("request_times", [])],
        )


@dataclass(frozen=True)
class LimitCheck:
    """Outcome of a quota or rate check."""

    allowed: bool
    reason: str | None = None
    reset_time: datetime | None = None
    current: UsageRecord | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "allowed": self.allowed,
            "reason": self.reason,
            "reset_time": self.reset_time.isoformat() if self.reset_time else None,
        }
