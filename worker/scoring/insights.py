"""Rule-based insight text and issue lists derived from a crawl."""

from dataclasses import dataclass
from enum import StrEnum

from worker.crawler.models import CrawlData
from worker.scoring.metrics import Metrics


class IssueType(StrEnum):
    """Issue severity shown on the page-details panel."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Issue:
    """A single detected page issue."""

    type: IssueType
    message: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"type": self.type.value, "message": self.message}


def generate_simulated_insights(website: str, score: int) -> str:
    """Demo-mode summary, banded on the simulated score."""
    intro = f"This demo shows how we'd analyze {website}. Your estimated score of {score}"
    if score >= 70:
        return (
            f"{intro} suggests good AI visibility potential. Upgrade to get real data "
            "from your actual website, including specific issues and fixes."
        )
    if score >= 50:
        return (
            f"{intro} suggests room for improvement. Upgrade to see exactly what's "
            "holding your site back and get step-by-step fixes."
        )
    return (
        f"{intro} suggests your site needs work to show up in AI answers. Upgrade "
        "to get a detailed roadmap for improvement."
    )


def generate_insights_from_crawl(crawl: CrawlData, metrics: Metrics) -> str:
    """Assemble the plain-language summary for a real analysis."""
    insights: list[str] = []

    avg_score = sum(metrics.values()) / 5
    if avg_score >= 75:
        insights.append(
            "Good news! Your website is well-prepared for AI search. AI assistants can "
            "understand your business and are likely to recommend you."
        )
    elif avg_score >= 50:
        insights.append(
            "Your website has a decent foundation, but there's room to improve. With a few "
            "changes, AI assistants will be more likely to recommend you."
        )
    else:
        insights.append(
            "Your website needs work before AI assistants will confidently recommend you. "
            "The good news: the fixes are straightforward."
        )

    if not crawl.schema_markup:
        insights.append(
            "Important: AI has no way to verify your business. Adding schema markup (a "
            "digital business card) would help AI trust and recommend you."
        )
    else:
        types = ", ".join(crawl.schema_types)
        insights.append(f"Good: AI can identify you as a {types.lower().replace('page', '', 1)}.")

    bluf = crawl.bluf_score
    if bluf < 40:
        insights.append(
            "Your content buries the main points. AI reads the first sentence after each "
            "heading, so make sure it contains your answer, not just an introduction."
        )
    elif bluf >= 70:
        insights.append(
            "Nice work! Your content puts answers first, which is exactly what AI looks "
            "for when deciding what to quote."
        )

    if not crawl.technical_signals.mobile_viewport:
        insights.append(
            "Your site isn't optimized for phones. Most people use AI on mobile, so this "
            "could hurt your visibility."
        )

    word_count = crawl.content_stats.word_count
    if word_count < 500:
        insights.append(
            f"Your content is quite short ({word_count} words). AI prefers thorough "
            "information it can trust and cite."
        )

    if not crawl.keyword_analysis.title_contains_keyword:
        insights.append(
            "Your target keywords aren't in your page title. AI uses the title to "
            "understand what your page is about."
        )

    return " ".join(insights)


def generate_issues_from_crawl(crawl: CrawlData) -> list[Issue]:
    """List concrete page issues: errors first, then warnings, then infos."""
    issues: list[Issue] = []
    stats = crawl.content_stats
    signals = crawl.technical_signals
    kw = crawl.keyword_analysis
    meta = crawl.meta_description

    def add(issue_type: IssueType, message: str) -> None:
        issues.append(Issue(type=issue_type, message=message))

    # Errors
    if len(crawl.title) < 10:
        add(IssueType.ERROR, "Missing or very short page title")
    if not meta:
        add(IssueType.ERROR, "No meta description found")
    if not crawl.schema_markup:
        add(IssueType.ERROR, "No structured data (schema.org) found")
    if not signals.has_https:
        add(IssueType.ERROR, "Site not using HTTPS")
    if not signals.mobile_viewport:
        add(IssueType.ERROR, "No mobile viewport meta tag")
    if crawl.h1_count == 0:
        add(IssueType.ERROR, "No H1 heading found")
    elif crawl.h1_count > 1:
        add(IssueType.ERROR, f"Multiple H1 tags found ({crawl.h1_count})")
    if not kw.title_contains_keyword:
        add(IssueType.ERROR, "Target keywords not in page title")

    # Warnings
    if meta and len(meta) < 120:
        add(
            IssueType.WARNING,
            f"Meta description too short ({len(meta)} chars, aim for 150-160)",
        )
    if stats.word_count < 500:
        add(IssueType.WARNING, f"Low word count ({stats.word_count} words)")
    if stats.readability_score < 50:
        add(
            IssueType.WARNING,
            f"Poor readability score ({stats.readability_score:g}/100)",
        )
    if crawl.bluf_score < 50:
        missing = len(crawl.headings) - crawl.direct_answer_count
        add(IssueType.WARNING, f"Low BLUF score - {missing} sections lack direct answers")
    if not signals.has_canonical:
        add(IssueType.WARNING, "No canonical URL tag")
    if not signals.has_open_graph:
        add(IssueType.WARNING, "No Open Graph meta tags")
    if not kw.meta_contains_keyword:
        add(IssueType.WARNING, "Target keywords not in meta description")
    if not kw.h1_contains_keyword:
        add(IssueType.WARNING, "Target keywords not in H1 heading")
    if crawl.h2_count < 2:
        add(IssueType.WARNING, "Few H2 subheadings (add more structure)")

    # Info
    if signals.load_time > 3000:
        add(IssueType.INFO, f"Slow load time ({signals.load_time / 1000:.1f}s)")
    if crawl.schema_markup and "FAQPage" not in crawl.schema_types:
        add(IssueType.INFO, "Consider adding FAQPage schema")
    if kw.keyword_density < 1:
        add(IssueType.INFO, f"Low keyword density ({kw.keyword_density:.1f}%)")
    elif kw.keyword_density > 3:
        add(
            IssueType.INFO,
            f"High keyword density ({kw.keyword_density:.1f}%) - may seem spammy",
        )

    return issues
