"""Aggregate citation results into rates, competitor standings and AEO advice.

All consumers (the AEO recommendations, the competitor table on an analysis,
the API) read competitor data through ``build_competitor_table`` so the
counts never disagree.
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from worker.fixes.aeo import TOP_COMPETITORS, AEORuleContext, generate_aeo_recommendations
from worker.fixes.models import AEORecommendation
from worker.observation.models import CitationResult, ContentAnalysis, PromptSpec

logger = structlog.get_logger(__name__)

DEFAULT_TABLE_LIMIT = 10


def citation_rate(results: list[CitationResult]) -> float:
    """Percentage of prompt x provider results that cite the user. 0 with no results."""
    if not results:
        return 0.0
    cited = sum(1 for r in results if r.is_cited)
    return cited / len(results) * 100


def count_competitors(results: Iterable[CitationResult]) -> Counter[str]:
    """Count every competitor citation occurrence across results."""
    counts: Counter[str] = Counter()
    for result in results:
        for competitor in result.competitors_cited:
            counts[competitor.domain] += 1
    return counts


@dataclass(frozen=True)
class CompetitorStanding:
    """How often one competitor was cited."""

    domain: str
    citation_count: int
    citation_rate: float  # Percent of results citing this domain
    contexts: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "domain": self.domain,
            "citation_count": self.citation_count,
            "citation_rate": round(self.citation_rate, 1),
            "contexts": list(self.contexts),
        }


@dataclass(frozen=True)
class CompetitorTable:
    """Competitor standings plus the user's own tally for comparison."""

    standings: list[CompetitorStanding]
    total_queries: int
    user_citation_count: int

    @property
    def user_citation_rate(self) -> float:
        if not self.total_queries:
            return 0.0
        return self.user_citation_count / self.total_queries * 100

    def top_domains(self, n: int = TOP_COMPETITORS) -> list[str]:
        return [s.domain for s in self.standings[:n]]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "standings": [s.to_dict() for s in self.standings],
            "total_queries": self.total_queries,
            "user_citation_count": self.user_citation_count,
            "user_citation_rate": round(self.user_citation_rate, 1),
        }


def rank_competitors(
    results: list[CitationResult],
    limit: int | None = None,
) -> list[CompetitorStanding]:
    """Competitors by citation count, descending; ties broken by domain name."""
    counts = count_competitors(results)
    contexts: dict[str, list[str]] = {}
    for result in results:
        for competitor in result.competitors_cited:
            seen = contexts.setdefault(competitor.domain, [])
            if competitor.context and competitor.context not in seen:
                seen.append(competitor.context)

    total = len(results)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    if limit is not None:
        ordered = ordered[:limit]

    return [
        CompetitorStanding(
            domain=domain,
            citation_count=count,
            citation_rate=count / total * 100 if total else 0.0,
            contexts=tuple(contexts.get(domain, [])),
        )
        for domain, count in ordered
    ]


def build_competitor_table(
    results: list[CitationResult],
    limit: int = DEFAULT_TABLE_LIMIT,
) -> CompetitorTable:
    return CompetitorTable(
        standings=rank_competitors(results, limit=limit),
        total_queries=len(results),
        user_citation_count=sum(1 for r in results if r.is_cited),
    )


def uncited_prompts(
    results: list[CitationResult],
    prompts: list[PromptSpec],
) -> list[PromptSpec]:
    """Prompts no provider cited the user for, in prompt order."""
    cited_ids = {r.prompt_id for r in results if r.is_cited}
    return [p for p in prompts if p.id not in cited_ids]


def provider_citation_rates(results: list[CitationResult]) -> dict[str, float]:
    """Citation rate per provider, in first-seen provider order."""
    by_provider: dict[str, list[CitationResult]] = {}
    for result in results:
        by_provider.setdefault(result.provider.value, []).append(result)
    return {provider: citation_rate(rs) for provider, rs in by_provider.items()}


def prompt_citation_rate(results: list[CitationResult]) -> float:
    """Share of distinct prompts cited by at least one provider.

    Informational only; the headline rate stays per prompt x provider.
    """
    prompt_ids = {r.prompt_id for r in results}
    if not prompt_ids:
        return 0.0
    cited_ids = {r.prompt_id for r in results if r.is_cited}
    return len(cited_ids) / len(prompt_ids) * 100


@dataclass(frozen=True)
class CitationAggregate:
    """Everything derived from one batch of citation results."""

    overall_citation_rate: float
    competitor_table: CompetitorTable
    uncited_prompts: list[PromptSpec] = field(default_factory=list)
    recommendations: list[AEORecommendation] = field(default_factory=list)


class CitationAggregator:
    """Turns citation results plus content scores into an aggregate."""

    def __init__(self, table_limit: int = DEFAULT_TABLE_LIMIT):
        self.table_limit = table_limit

    def aggregate(
        self,
        results: list[CitationResult],
        content_analysis: ContentAnalysis,
        prompts: list[PromptSpec],
    ) -> CitationAggregate:
        rate = citation_rate(results)
        table = build_competitor_table(results, limit=self.table_limit)
        uncited = uncited_prompts(results, prompts)

        recommendations = generate_aeo_recommendations(
            AEORuleContext(
                citation_rate=rate,
                content=content_analysis,
                uncited_prompts=uncited,
                top_competitors=table.top_domains(TOP_COMPETITORS),
            )
        )

        logger.debug(
            "citations_aggregated",
            results=len(results),
            citation_rate=round(rate, 1),
            competitors=len(table.standings),
            uncited=len(uncited),
            recommendations=len(recommendations),
        )
        return CitationAggregate(
            overall_citation_rate=rate,
            competitor_table=table,
            uncited_prompts=uncited,
            recommendations=recommendations,
        )
