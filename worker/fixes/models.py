"""Recommendation models shared by the crawl and AEO rule batteries."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

MAX_RECOMMENDATIONS = 6


class Priority(StrEnum):
    """Recommendation priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Difficulty(StrEnum):
    """How hard a recommendation is to carry out."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


PRIORITY_ORDER: dict[Priority, int] = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}


@dataclass(frozen=True)
class Recommendation:
    """A single actionable recommendation for a real or simulated analysis."""

    id: str
    title: str
    description: str
    priority: Priority
    difficulty: Difficulty
    estimated_time: str
    expected_impact: int  # Score points, > 0

    def __post_init__(self) -> None:
        if self.expected_impact <= 0:
            raise ValueError(f"expected_impact must be positive, got {self.expected_impact}")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "difficulty": self.difficulty.value,
            "estimated_time": self.estimated_time,
            "expected_impact": self.expected_impact,
        }


@dataclass(frozen=True)
class AEORecommendation:
    """Citation-focused recommendation, traceable to the prompts behind it."""

    id: str
    title: str
    description: str
    priority: Priority
    difficulty: Difficulty
    estimated_time: str
    expected_impact: str
    related_prompts: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "difficulty": self.difficulty.value,
            "estimated_time": self.estimated_time,
            "expected_impact": self.expected_impact,
            "related_prompts": list(self.related_prompts),
        }


def rank_recommendations(
    recommendations: Iterable[Recommendation],
    limit: int = MAX_RECOMMENDATIONS,
) -> list[Recommendation]:
    """Stable sort by priority then descending impact, capped to ``limit``."""
    ranked = sorted(
        recommendations,
        key=lambda r: (PRIORITY_ORDER[r.priority], -r.expected_impact),
    )
    return ranked[:limit]


def rank_by_priority(
    recommendations: Iterable[AEORecommendation],
    limit: int = MAX_RECOMMENDATIONS,
) -> list[AEORecommendation]:
    """Stable sort by priority only, capped to ``limit``."""
    return sorted(recommendations, key=lambda r: PRIORITY_ORDER[r.priority])[:limit]
