"""Analysis result records."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from worker.crawler.models import CrawlData, PageSummary
from worker.fixes.models import AEORecommendation, Recommendation
from worker.observation.aggregator import CompetitorTable, build_competitor_table
from worker.observation.models import CitationResult, ContentAnalysis, PromptSpec, ProviderName
from worker.scoring.insights import Issue
from worker.scoring.metrics import Metrics
from worker.usage.costs import CostInfo
from worker.usage.policy import Identity


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class CrawlSummary:
    """The parts of a crawl shown on the page-details panel."""

    url: str
    title: str
    meta_description: str
    headings: list[dict]
    schema_types: list[str]
    content_stats: dict
    technical_signals: dict
    issues: list[Issue] = field(default_factory=list)
    pages_analyzed: int = 1
    pages: list[PageSummary] = field(default_factory=list)

    @classmethod
    def from_crawl(cls, crawl: CrawlData, issues: list[Issue] | None = None) -> "CrawlSummary":
        return cls(
            url=crawl.url,
            title=crawl.title,
            meta_description=crawl.meta_description,
            headings=[
                {"level": h.level, "text": h.text, "has_direct_answer": h.has_direct_answer}
                for h in crawl.headings
            ],
            schema_types=crawl.schema_types,
            content_stats=crawl.content_stats.model_dump(),
            technical_signals=crawl.technical_signals.model_dump(),
            issues=list(issues or []),
            pages_analyzed=crawl.pages_analyzed,
            pages=list(crawl.pages),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "url": self.url,
            "title": self.title,
            "meta_description": self.meta_description,
            "headings": list(self.headings),
            "schema_types": list(self.schema_types),
            "content_stats": dict(self.content_stats),
            "technical_signals": dict(self.technical_signals),
            "issues": [i.to_dict() for i in self.issues],
            "pages_analyzed": self.pages_analyzed,
            "pages": [p.model_dump() for p in self.pages],
        }


@dataclass(frozen=True)
class Analysis:
    """A completed website analysis, real or simulated."""

    id: str
    user_id: str
    website: str
    keywords: list[str]
    model: str
    score: int
    metrics: Metrics
    insights: str
    predicted_rank: int
    category: str
    recommendations: list[Recommendation]
    is_simulated: bool
    cost_info: CostInfo
    created_at: datetime = field(default_factory=_now)
    crawl_summary: CrawlSummary | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "website": self.website,
            "keywords": list(self.keywords),
            "model": self.model,
            "score": self.score,
            "metrics": self.metrics.to_dict(),
            "insights": self.insights,
            "predicted_rank": self.predicted_rank,
            "category": self.category,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "is_simulated": self.is_simulated,
            "cost_info": self.cost_info.to_dict(),
            "created_at": self.created_at.isoformat(),
            "crawl_summary": self.crawl_summary.to_dict() if self.crawl_summary else None,
        }


@dataclass(frozen=True)
class AEOAnalysis:
    """A citation (AEO) analysis.

    Competitor data is never stored; ``competitor_table()`` derives it from
    ``citation_results`` every time.
    """

    id: str
    user_id: str
    website: str
    brand_name: str | None
    prompts: list[PromptSpec]
    citation_results: list[CitationResult]
    overall_citation_rate: float
    providers_used: list[ProviderName]
    content_analysis: ContentAnalysis
    recommendations: list[AEORecommendation]
    is_simulated: bool
    cost_info: CostInfo
    created_at: datetime = field(default_factory=_now)
    crawl_summary: CrawlSummary | None = None

    def competitor_table(self, limit: int = 10) -> CompetitorTable:
        return build_competitor_table(self.citation_results, limit=limit)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "website": self.website,
            "brand_name": self.brand_name,
            "prompts": [p.model_dump() for p in self.prompts],
            "citation_results": [r.to_dict() for r in self.citation_results],
            "overall_citation_rate": round(self.overall_citation_rate, 1),
            "providers_used": [p.value for p in self.providers_used],
            "content_analysis": self.content_analysis.to_dict(),
            "competitor_table": self.competitor_table().to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "is_simulated": self.is_simulated,
            "cost_info": self.cost_info.to_dict(),
            "created_at": self.created_at.isoformat(),
            "crawl_summary": self.crawl_summary.to_dict() if self.crawl_summary else None,
        }


__all__ = [
    "AEOAnalysis",
    "Analysis",
    "ContentAnalysis",
    "CostInfo",
    "CrawlSummary",
    "Identity",
]
