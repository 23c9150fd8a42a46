"""Data models for citation observation."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from worker.crawler.models import CrawlData
from worker.scoring.metrics import round_half_up


class ProviderName(StrEnum):
    """AI providers the citation service can query."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    PERPLEXITY = "perplexity"
    LOCAL = "local"  # Never sent to the citation service


def active_providers(providers: list[ProviderName]) -> list[ProviderName]:
    """Drop providers the citation service does not query, keeping order."""
    return [p for p in providers if p != ProviderName.LOCAL]


class CitationModel(BaseModel):
    """Base model for citation service payloads (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class PromptSpec(CitationModel):
    """A prompt to check, with a caller-chosen id."""

    id: str
    text: str


class CompetitorCitation(CitationModel):
    """Another site the provider cited in its answer."""

    domain: str
    url: str | None = None
    context: str = ""
    position: int = Field(0, ge=0)

    @field_validator("context", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class CitationResult(CitationModel):
    """One provider's answer to one prompt."""

    prompt_id: str
    prompt: str = ""
    provider: ProviderName
    model_used: str = ""
    response: str = ""
    is_cited: bool = False
    citation_context: str | None = None
    competitors_cited: list[CompetitorCitation] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    tokens_used: int = Field(0, ge=0)
    cost: float = Field(0.0, ge=0)

    @field_validator("competitors_cited", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return self.model_dump(mode="json")


class CitationCheckResult(CitationModel):
    """Results of a citation check plus what the providers charged."""

    results: list[CitationResult] = Field(default_factory=list)
    total_cost: float = Field(0.0, ge=0)


@dataclass(frozen=True)
class ContentAnalysis:
    """Content scores that drive the AEO recommendations, each 0-100."""

    bluf_score: int
    schema_score: int
    readability_score: int
    content_depth: int

    @classmethod
    def from_crawl(cls, crawl: CrawlData) -> "ContentAnalysis":
        return cls(
            bluf_score=round_half_up(crawl.bluf_score),
            schema_score=min(100, len(crawl.schema_markup) * 20),
            readability_score=round_half_up(crawl.content_stats.readability_score),
            content_depth=min(100, round_half_up(crawl.content_stats.word_count / 30)),
        )

    @classmethod
    def defaults(cls) -> "ContentAnalysis":
        """Neutral scores used when the site could not be crawled."""
        return cls(bluf_score=50, schema_score=30, readability_score=60, content_depth=40)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "bluf_score": self.bluf_score,
            "schema_score": self.schema_score,
            "readability_score": self.readability_score,
            "content_depth": self.content_depth,
        }
