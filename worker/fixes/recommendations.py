"""Crawl-based recommendation engine.

Each rule is an independent check over the crawl and metrics that emits
at most one recommendation. Rules are evaluated in registration order;
the engine then ranks the candidates (priority, then impact) and keeps
the top six. There is no randomness anywhere on this path.
"""

from collections.abc import Callable
from dataclasses import dataclass

from worker.crawler.models import CrawlData
from worker.fixes.models import (
    MAX_RECOMMENDATIONS,
    Difficulty,
    Priority,
    Recommendation,
    rank_recommendations,
)
from worker.scoring.metrics import Metrics

BLUF_THRESHOLD = 60
THIN_CONTENT_WORDS = 800
TARGET_CONTENT_WORDS = 1000
LOW_READABILITY = 50
SHORT_META_CHARS = 50
MIN_H2_FOR_LONG_PAGES = 3
LONG_PAGE_WORDS = 500


@dataclass(frozen=True)
class RuleContext:
    """Inputs shared by every rule."""

    crawl: CrawlData
    metrics: Metrics


RuleCheck = Callable[[RuleContext], Recommendation | None]


@dataclass(frozen=True)
class RecommendationRule:
    """A named check that may produce one recommendation."""

    name: str
    check: RuleCheck

    def __call__(self, ctx: RuleContext) -> Recommendation | None:
        return self.check(ctx)


CRAWL_RULES: list[RecommendationRule] = []


def crawl_rule(name: str) -> Callable[[RuleCheck], RuleCheck]:
    """Register a check in CRAWL_RULES, preserving definition order."""

    def register(check: RuleCheck) -> RuleCheck:
        CRAWL_RULES.append(RecommendationRule(name=name, check=check))
        return check

    return register


@crawl_rule("schema")
def _missing_schema(ctx: RuleContext) -> Recommendation | None:
    if ctx.crawl.schema_markup:
        return None
    return Recommendation(
        id="schema-1",
        title="Help AI Know Who You Are",
        description=(
            "AI currently has no way to confirm your business exists. Schema markup works "
            "like an ID card that assistants can read.\n\n"
            'What to do: add "Organization" schema with your business name, website and '
            "what you do.\n\n"
            'On WordPress, plugins such as "Yoast SEO" or "Rank Math" add it for you.'
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.MEDIUM,
        estimated_time="1 hour",
        expected_impact=25,
    )


@crawl_rule("faq_opportunity")
def _faq_opportunity(ctx: RuleContext) -> Recommendation | None:
    questions = ctx.crawl.question_headings
    if len(questions) < 2 or "FAQPage" in ctx.crawl.schema_types:
        return None
    examples = ", ".join(f'"{h.text}"' for h in questions[:3])
    return Recommendation(
        id="schema-faq",
        title="Turn Your FAQs Into AI-Ready Content",
        description=(
            f"Your site already asks {len(questions)} questions (for example {examples}). "
            "These are exactly what people ask AI assistants.\n\n"
            'What to do: mark them up with "FAQ schema" so assistants can quote your '
            "answers as official Q&As.\n\n"
            "Squarespace, Wix and WordPress all have FAQ blocks that do this automatically."
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.EASY,
        estimated_time="30 minutes",
        expected_impact=20,
    )


@crawl_rule("answer_first")
def _answer_first(ctx: RuleContext) -> Recommendation | None:
    crawl = ctx.crawl
    if crawl.bluf_score >= BLUF_THRESHOLD:
        return None
    total = len(crawl.headings)
    buried = total - crawl.direct_answer_count
    return Recommendation(
        id="bluf-1",
        title="Put Your Answers First (Not Last)",
        description=(
            f"{buried} of your {total} sections bury the main point. AI reads the first "
            "sentence after each heading and moves on if the answer isn't there.\n\n"
            "What to do: open every section with a one or two sentence answer, then add "
            "the detail.\n\n"
            'Before: "There are many factors to consider when choosing..."\n'
            'After: "The best choice is X because Y. Here\'s why..."'
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.MEDIUM,
        estimated_time="2 hours",
        expected_impact=18,
    )


@crawl_rule("title_keyword")
def _title_keyword(ctx: RuleContext) -> Recommendation | None:
    if ctx.crawl.keyword_analysis.title_contains_keyword:
        return None
    title = ctx.crawl.title or "(no title found)"
    return Recommendation(
        id="keyword-title",
        title="Add Your Main Topic to the Page Title",
        description=(
            f'Your page title is: "{title}"\n\n'
            "Your target keywords aren't in it, so AI can't tell what you do from the "
            'title alone. Think "Bob\'s Place" versus "Bob\'s Bakery".\n\n'
            "What to do: rewrite the title to include your main keyword and keep it under "
            "60 characters.\n\n"
            'Example: "[What You Do] - [Benefit] | [Your Brand]"'
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.EASY,
        estimated_time="10 minutes",
        expected_impact=15,
    )


@crawl_rule("meta_description")
def _meta_description(ctx: RuleContext) -> Recommendation | None:
    meta = ctx.crawl.meta_description
    if not meta or len(meta) < SHORT_META_CHARS:
        problem = (
            "Your page has no meta description." if not meta
            else "Your meta description is too short."
        )
        return Recommendation(
            id="meta-desc",
            title="Write a Summary AI Can Use",
            description=(
                f"{problem} It is the elevator pitch that tells AI what the page is "
                "about.\n\n"
                "What to do: write 150-160 characters that\n"
                "- say what visitors will learn or get\n"
                "- include your main keyword naturally\n"
                "- sound like something a person would say"
            ),
            priority=Priority.HIGH,
            difficulty=Difficulty.EASY,
            estimated_time="10 minutes",
            expected_impact=12,
        )
    if not ctx.crawl.keyword_analysis.meta_contains_keyword:
        return Recommendation(
            id="keyword-meta",
            title="Include Your Keywords in the Description",
            description=(
                f'Your current description: "{meta[:80]}..."\n\n'
                "Your target keywords aren't in it, and AI leans on this text to "
                "understand the page.\n\n"
                "What to do: rewrite it so the main keywords appear naturally."
            ),
            priority=Priority.MEDIUM,
            difficulty=Difficulty.EASY,
            estimated_time="10 minutes",
            expected_impact=8,
        )
    return None


@crawl_rule("mobile_viewport")
def _mobile_viewport(ctx: RuleContext) -> Recommendation | None:
    if ctx.crawl.technical_signals.mobile_viewport:
        return None
    return Recommendation(
        id="tech-mobile",
        title="Make Your Site Work on Phones",
        description=(
            "Your site isn't set up for mobile devices. Most people use AI assistants on "
            "their phones, and assistants avoid recommending sites that break there.\n\n"
            'What to do: add a "mobile viewport meta tag", or check the mobile preview '
            "settings of your website builder. It is usually a five minute fix."
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.EASY,
        estimated_time="10 minutes",
        expected_impact=15,
    )


@crawl_rule("thin_content")
def _thin_content(ctx: RuleContext) -> Recommendation | None:
    words = ctx.crawl.content_stats.word_count
    if words >= THIN_CONTENT_WORDS:
        return None
    needed = max(0, TARGET_CONTENT_WORDS - words)
    return Recommendation(
        id="content-length",
        title="Add More Helpful Information",
        description=(
            f"Your page has {words} words. AI prefers thorough content (1,000+ words) "
            "because it can give better answers from it.\n\n"
            f"What to do: add {needed}+ words that answer common customer questions:\n"
            "- What problem does this solve?\n"
            "- How does it work?\n"
            "- Who is it best for?\n"
            "- What makes you different?"
        ),
        priority=Priority.MEDIUM,
        difficulty=Difficulty.MEDIUM,
        estimated_time="2-3 hours",
        expected_impact=12,
    )


@crawl_rule("readability")
def _readability(ctx: RuleContext) -> Recommendation | None:
    score = ctx.crawl.content_stats.readability_score
    if score >= LOW_READABILITY:
        return None
    return Recommendation(
        id="content-readability",
        title="Simplify Your Writing",
        description=(
            f"Your content is harder to read than it should be (readability score: "
            f"{score:g}/100). AI won't quote writing it struggles to follow.\n\n"
            "What to do:\n"
            "- Keep sentences to 15-20 words\n"
            "- Swap jargon for everyday words\n"
            "- Use bullet points for lists\n"
            "- Break paragraphs more often"
        ),
        priority=Priority.MEDIUM,
        difficulty=Difficulty.MEDIUM,
        estimated_time="1-2 hours",
        expected_impact=10,
    )


@crawl_rule("h1")
def _h1(ctx: RuleContext) -> Recommendation | None:
    h1_count = ctx.crawl.h1_count
    if h1_count == 0:
        return Recommendation(
            id="heading-h1",
            title="Add a Main Headline",
            description=(
                "Your page has no main headline (H1), so AI has to guess what it is "
                "about.\n\n"
                "What to do: add one H1 at the top that states the topic and includes "
                "your main keyword.\n\n"
                'Example: "The Complete Guide to [Your Topic]"'
            ),
            priority=Priority.HIGH,
            difficulty=Difficulty.EASY,
            estimated_time="5 minutes",
            expected_impact=15,
        )
    if h1_count > 1:
        return Recommendation(
            id="heading-h1-multiple",
            title="Use Only One Main Headline",
            description=(
                f"Your page has {h1_count} main headlines (H1s), which blurs what the "
                "page is really about.\n\n"
                "What to do: keep the most important H1 and turn the others into H2 "
                "subheadings."
            ),
            priority=Priority.HIGH,
            difficulty=Difficulty.EASY,
            estimated_time="10 minutes",
            expected_impact=10,
        )
    return None


@crawl_rule("subheadings")
def _subheadings(ctx: RuleContext) -> Recommendation | None:
    crawl = ctx.crawl
    words = crawl.content_stats.word_count
    if crawl.h2_count >= MIN_H2_FOR_LONG_PAGES or words <= LONG_PAGE_WORDS:
        return None
    return Recommendation(
        id="heading-structure",
        title="Break Up Your Content with Subheadings",
        description=(
            f"You have {words} words but only {crawl.h2_count} subheadings, which makes "
            "the page hard to scan for people and for AI.\n\n"
            "What to do: add an H2 every 200-300 words. Good subheadings say what the "
            "section covers and often work as the questions people ask."
        ),
        priority=Priority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time="20 minutes",
        expected_impact=8,
    )


@crawl_rule("open_graph")
def _open_graph(ctx: RuleContext) -> Recommendation | None:
    if ctx.crawl.technical_signals.has_open_graph:
        return None
    return Recommendation(
        id="tech-og",
        title="Improve How Your Links Look When Shared",
        description=(
            "Shared links to your page show a generic preview. Open Graph tags control "
            "the title, description and image used in social posts and chat apps.\n\n"
            'What to do: fill in the "Social sharing" or "SEO" section of your website '
            "builder."
        ),
        priority=Priority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time="15 minutes",
        expected_impact=5,
    )


class RecommendationEngine:
    """Runs a rule battery and ranks its output."""

    def __init__(
        self,
        rules: list[RecommendationRule] | None = None,
        max_recommendations: int = MAX_RECOMMENDATIONS,
    ):
        self.rules = list(CRAWL_RULES if rules is None else rules)
        self.max_recommendations = max_recommendations

    def candidates(self, crawl: CrawlData, metrics: Metrics) -> list[Recommendation]:
        """Every recommendation the rules emit, in rule order, before ranking."""
        ctx = RuleContext(crawl=crawl, metrics=metrics)
        found: list[Recommendation] = []
        for rule in self.rules:
            recommendation = rule(ctx)
            if recommendation is not None:
                found.append(recommendation)
        return found

    def recommend(self, crawl: CrawlData, metrics: Metrics) -> list[Recommendation]:
        return rank_recommendations(
            self.candidates(crawl, metrics),
            limit=self.max_recommendations,
        )


def compute_recommendations(crawl: CrawlData, metrics: Metrics) -> list[Recommendation]:
    """Ranked, capped recommendations for a crawl."""
    return RecommendationEngine().recommend(crawl, metrics)
