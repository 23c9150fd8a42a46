"""Simulated analyses for trial/demo plans and crawl-failure fallback.

No network calls. All randomness comes from the injected ``random.Random``
so a seeded simulator is fully reproducible.
"""

import random

from worker.fixes.models import Difficulty, Priority, Recommendation, rank_recommendations
from worker.observation.models import (
    CitationResult,
    ContentAnalysis,
    PromptSpec,
    ProviderName,
)
from worker.observation.simulation import simulate_citation_results, simulate_content_analysis
from worker.scoring.metrics import (
    METRIC_NAMES,
    Metrics,
    calculate_overall_score,
    clamp,
    round_half_up,
)

BASE_SCORE_MIN = 45
BASE_SCORE_SPAN = 35
METRIC_VARIANCE = 10

# (floor, ceiling) per metric
METRIC_BOUNDS: dict[str, tuple[int, int]] = {
    "content_clarity": (20, 95),
    "semantic_richness": (20, 95),
    "structured_data": (15, 90),
    "natural_language": (25, 95),
    "keyword_relevance": (30, 95),
}

SIMULATED_RECOMMENDATIONS = (
    Recommendation(
        id="sim-1",
        title="Help AI Verify Your Business",
        description=(
            "Add schema markup so AI assistants can confirm your business exists and "
            "what it does. Think of it as handing AI your business card."
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.MEDIUM,
        estimated_time="1 hour",
        expected_impact=12,
    ),
    Recommendation(
        id="sim-2",
        title="Put Your Answers First",
        description=(
            "AI reads the first sentence after each heading. Make sure the main point "
            "is there and not halfway down the paragraph."
        ),
        priority=Priority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time="2 hours",
        expected_impact=8,
    ),
    Recommendation(
        id="sim-3",
        title="Answer Questions People Actually Ask",
        description=(
            "Add an FAQ section with the questions your customers really ask. They are "
            "the same questions people put to AI assistants."
        ),
        priority=Priority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time="1 hour",
        expected_impact=10,
    ),
)


class Simulator:
    """Produces representative, non-billable analysis results."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def metrics(self) -> tuple[Metrics, int]:
        """Simulated metrics and their overall score."""
        base = BASE_SCORE_MIN + self.rng.random() * BASE_SCORE_SPAN
        raw: dict[str, float] = {}
        for name in METRIC_NAMES:
            low, high = METRIC_BOUNDS[name]
            raw[name] = clamp(base + (self.rng.random() - 0.5) * METRIC_VARIANCE, low, high)

        metrics = Metrics(**{name: round_half_up(value) for name, value in raw.items()})
        return metrics, calculate_overall_score(metrics)

    def recommendations(self) -> list[Recommendation]:
        count = 2 + self.rng.randrange(2)
        return rank_recommendations(SIMULATED_RECOMMENDATIONS[:count])

    def citation_results(
        self,
        prompts: list[PromptSpec],
        website: str,
        brand_name: str | None,
        providers: list[ProviderName],
    ) -> list[CitationResult]:
        return simulate_citation_results(prompts, website, brand_name, providers, self.rng)

    def content_analysis(self) -> ContentAnalysis:
        return simulate_content_analysis(self.rng)
