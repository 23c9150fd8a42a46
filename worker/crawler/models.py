"""Crawl payload models.

The crawl service answers with loosely-typed camelCase JSON. These models
validate it at the boundary so that scoring never sees missing or
negative values.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CRAWL_SCHEMA_VERSION = 1

# Headings that read like a question people would ask an assistant
QUESTION_PREFIXES = ("how", "what", "why", "when", "can ")


class CrawlModel(BaseModel):
    """Base model: camelCase aliases, snake_case attributes, unknown keys dropped."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class CrawlHeading(CrawlModel):
    """A heading and whether the sentence after it answers directly."""

    level: int = Field(..., ge=1, le=6)
    text: str = ""
    has_direct_answer: bool = False
    following_content: str = ""

    @field_validator("text", "following_content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_question(self) -> bool:
        """Heading phrased as a question."""
        lowered = self.text.lower()
        return "?" in self.text or lowered.startswith(QUESTION_PREFIXES)


class SchemaMarkup(CrawlModel):
    """One schema.org block found on the page."""

    type: str
    properties: dict[str, Any] = Field(default_factory=dict)


class ContentStats(CrawlModel):
    """Content statistics summed across analyzed pages."""

    word_count: int = Field(0, ge=0)
    paragraph_count: int = Field(0, ge=0)
    avg_sentence_length: float = Field(0.0, ge=0)
    readability_score: float = Field(0.0, ge=0, le=100)


class TechnicalSignals(CrawlModel):
    """Technical page signals."""

    has_https: bool = False
    has_canonical: bool = False
    has_open_graph: bool = False
    has_twitter_card: bool = False
    mobile_viewport: bool = False
    load_time: float = Field(0.0, ge=0, description="Load time in milliseconds")


class KeywordAnalysis(CrawlModel):
    """Where the target keywords appear on the page."""

    title_contains_keyword: bool = False
    h1_contains_keyword: bool = False
    meta_contains_keyword: bool = False
    keyword_density: float = Field(0.0, ge=0, description="Percentage of words")
    keyword_occurrences: int = Field(0, ge=0)


class PageSummary(CrawlModel):
    """Per-page summary for multi-page crawls."""

    url: str
    title: str = ""
    word_count: int = Field(0, ge=0)
    headings_count: int = Field(0, ge=0)
    schema_count: int = Field(0, ge=0)
    issues: list[str] = Field(default_factory=list)


class AggregatedStats(CrawlModel):
    """Site-wide stats across all crawled pages."""

    total_words: int = 0
    total_headings: int = 0
    total_schemas: int = 0
    avg_readability: float = 0.0
    pages_with_schema: int = 0
    pages_with_meta: int = 0


class CrawlData(CrawlModel):
    """Structured crawl of a website, read-only input to scoring."""

    schema_version: int = CRAWL_SCHEMA_VERSION
    url: str
    title: str = ""
    meta_description: str = ""
    headings: list[CrawlHeading] = Field(default_factory=list)
    schema_markup: list[SchemaMarkup] = Field(default_factory=list)
    content_stats: ContentStats = Field(default_factory=ContentStats)
    technical_signals: TechnicalSignals = Field(default_factory=TechnicalSignals)
    keyword_analysis: KeywordAnalysis = Field(default_factory=KeywordAnalysis)

    # Multi-page crawl data
    pages_analyzed: int = 1
    pages: list[PageSummary] = Field(default_factory=list)
    aggregated_stats: AggregatedStats | None = None

    @field_validator("title", "meta_description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("headings", "schema_markup", "pages", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("pages_analyzed", mode="before")
    @classmethod
    def _at_least_one_page(cls, value: Any) -> Any:
        if value is None:
            return 1
        if isinstance(value, int | float) and value < 1:
            return 1
        return value

    @field_validator("schema_version")
    @classmethod
    def _known_version(cls, value: int) -> int:
        if value > CRAWL_SCHEMA_VERSION:
            raise ValueError(f"Unsupported crawl schema version {value}")
        return value

    @property
    def schema_types(self) -> list[str]:
        """Schema types in page order."""
        return [s.type for s in self.schema_markup]

    @property
    def heading_levels(self) -> set[int]:
        """Distinct heading levels used."""
        return {h.level for h in self.headings}

    @property
    def h1_count(self) -> int:
        return sum(1 for h in self.headings if h.level == 1)

    @property
    def h2_count(self) -> int:
        return sum(1 for h in self.headings if h.level == 2)

    @property
    def direct_answer_count(self) -> int:
        return sum(1 for h in self.headings if h.has_direct_answer)

    @property
    def bluf_score(self) -> float:
        """Share of headings followed by a direct answer, 0-100. Zero without headings."""
        if not self.headings:
            return 0.0
        return self.direct_answer_count / len(self.headings) * 100

    @property
    def question_headings(self) -> list[CrawlHeading]:
        return [h for h in self.headings if h.is_question]
