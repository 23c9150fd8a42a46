"""Quality metrics calculator.

Maps a crawl to five 0-100 scores:

    content_clarity    readability 40% + BLUF 30% + heading structure 30%
    semantic_richness  words-per-page curve 50% + heading depth + paragraph depth
    structured_data    15 per schema block + 20 per high-value type
    natural_language   readability 60% + sentence length 40%
    keyword_relevance  title 35 + H1 25 + meta 20 + density bonus
"""

import math
from dataclasses import dataclass

from worker.crawler.models import CrawlData

HIGH_VALUE_SCHEMAS = frozenset(
    {"FAQPage", "HowTo", "Article", "Product", "Organization", "LocalBusiness"}
)

OPTIMAL_SENTENCE_LENGTH = 17  # words

METRIC_NAMES = (
    "content_clarity",
    "semantic_richness",
    "structured_data",
    "natural_language",
    "keyword_relevance",
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class Metrics:
    """The five discoverability scores, each an int in [0, 100]."""

    content_clarity: int
    semantic_richness: int
    structured_data: int
    natural_language: int
    keyword_relevance: int

    def values(self) -> list[int]:
        return [getattr(self, name) for name in METRIC_NAMES]

    @property
    def overall(self) -> int:
        """Unweighted mean of the five metrics, rounded."""
        return calculate_overall_score(self)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {name: getattr(self, name) for name in METRIC_NAMES}


def calculate_overall_score(metrics: Metrics) -> int:
    return round_half_up(sum(metrics.values()) / len(METRIC_NAMES))


def _word_curve(avg_words_per_page: float) -> float:
    """0-90 curve that rewards 500-1500 words per page and saturates above."""
    if avg_words_per_page < 300:
        return avg_words_per_page / 300 * 40
    if avg_words_per_page < 800:
        return 40 + (avg_words_per_page - 300) / 500 * 30
    if avg_words_per_page < 1500:
        return 70 + (avg_words_per_page - 800) / 700 * 20
    return 90


def content_clarity_score(crawl: CrawlData) -> int:
    heading_structure = min(100, len(crawl.headings) * 10)
    return round_half_up(
        crawl.content_stats.readability_score * 0.4
        + crawl.bluf_score * 0.3
        + heading_structure * 0.3
    )


def semantic_richness_score(crawl: CrawlData) -> int:
    pages = max(1, crawl.pages_analyzed or 1)
    stats = crawl.content_stats

    word_score = _word_curve(stats.word_count / pages)
    heading_depth = min(
        25, len(crawl.heading_levels) * 5 + min(10, len(crawl.headings) / pages)
    )
    paragraph_depth = min(25, stats.paragraph_count / pages * 2)

    return round_half_up(min(100, word_score * 0.5 + heading_depth + paragraph_depth))


def structured_data_score(crawl: CrawlData) -> int:
    high_value = sum(1 for t in crawl.schema_types if t in HIGH_VALUE_SCHEMAS)
    return min(100, round_half_up(len(crawl.schema_markup) * 15 + high_value * 20))


def sentence_length_score(avg_sentence_length: float) -> float:
    return max(0.0, 100 - abs(avg_sentence_length - OPTIMAL_SENTENCE_LENGTH) * 5)


def natural_language_score(crawl: CrawlData) -> int:
    stats = crawl.content_stats
    return round_half_up(
        stats.readability_score * 0.6 + sentence_length_score(stats.avg_sentence_length) * 0.4
    )


def keyword_density_bonus(density: float) -> int:
    if 1 <= density <= 3:
        return 20
    if density > 0:
        return 10
    return 0


def keyword_relevance_score(crawl: CrawlData) -> int:
    kw = crawl.keyword_analysis
    score = 0
    if kw.title_contains_keyword:
        score += 35
    if kw.h1_contains_keyword:
        score += 25
    if kw.meta_contains_keyword:
        score += 20
    return min(100, score + keyword_density_bonus(kw.keyword_density))


def compute_metrics(crawl: CrawlData) -> Metrics:
    """Compute all five metrics from a crawl, each clamped to [0, 100]."""
    return Metrics(
        content_clarity=int(clamp(content_clarity_score(crawl))),
        semantic_richness=int(clamp(semantic_richness_score(crawl))),
        structured_data=int(clamp(structured_data_score(crawl))),
        natural_language=int(clamp(natural_language_score(crawl))),
        keyword_relevance=int(clamp(keyword_relevance_score(crawl))),
    )


def calculate_predicted_rank(score: int) -> int:
    """Expected position in an AI answer for an overall score."""
    if score >= 85:
        return 1
    if score >= 75:
        return 2
    if score >= 65:
        return 3
    if score >= 55:
        return 5
    if score >= 45:
        return 7
    return 10


def category_from_score(score: int) -> str:
    if score >= 85:
        return "Featured Answer"
    if score >= 70:
        return "Top Result"
    if score >= 55:
        return "Visible"
    return "Buried"
