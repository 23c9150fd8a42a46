"""Citation-focused (AEO) recommendation rules.

Each rule reads the aggregated citation evidence and the content scores and
emits at most one recommendation. Output is sorted by priority (stable, so
rule order breaks ties) and capped at six.
"""

from dataclasses import dataclass, field

from worker.fixes.models import (
    MAX_RECOMMENDATIONS,
    AEORecommendation,
    Difficulty,
    Priority,
    rank_by_priority,
)
from worker.observation.models import ContentAnalysis, PromptSpec
from worker.scoring.metrics import round_half_up

LOW_CITATION_RATE = 30
LOW_SCHEMA_SCORE = 40
LOW_BLUF_SCORE = 50
LOW_READABILITY = 50
TOP_COMPETITORS = 3


@dataclass(frozen=True)
class AEORuleContext:
    """Aggregated citation evidence the AEO rules read."""

    citation_rate: float
    content: ContentAnalysis
    uncited_prompts: list[PromptSpec] = field(default_factory=list)
    top_competitors: list[str] = field(default_factory=list)


def _low_citation_rate(ctx: AEORuleContext) -> AEORecommendation | None:
    if ctx.citation_rate >= LOW_CITATION_RATE:
        return None
    return AEORecommendation(
        id="aeo-1",
        title="Increase Your AI Visibility",
        description=(
            f"AI assistants cited you in only {round_half_up(ctx.citation_rate)}% of "
            "queries. To improve:\n\n"
            "1. Publish content that answers the questions in your prompts directly\n"
            "2. Write in clear, factual sentences an assistant can quote\n"
            "3. Add schema markup so assistants can verify your expertise"
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.MEDIUM,
        estimated_time="2-4 hours",
        expected_impact="Could increase citation rate by 20-40%",
        related_prompts=tuple(p.id for p in ctx.uncited_prompts[:3]),
    )


def _low_schema(ctx: AEORuleContext) -> AEORecommendation | None:
    if ctx.content.schema_score >= LOW_SCHEMA_SCORE:
        return None
    return AEORecommendation(
        id="aeo-2",
        title="Add Structured Data for AI Recognition",
        description=(
            "Assistants use schema.org markup to check facts about a business. Add:\n\n"
            "- Organization schema (who you are)\n"
            "- FAQPage schema (your questions and answers)\n"
            "- Product or Service schema (what you offer)\n\n"
            "Verified facts are easier for AI to trust and cite."
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.MEDIUM,
        estimated_time="1-2 hours",
        expected_impact="Increase AI trust score by ~25%",
    )


def _low_bluf(ctx: AEORuleContext) -> AEORecommendation | None:
    if ctx.content.bluf_score >= LOW_BLUF_SCORE:
        return None
    return AEORecommendation(
        id="aeo-3",
        title="Put Answers First (BLUF Format)",
        description=(
            "Assistants quote the first sentence or two after a heading, and many of "
            "your sections bury the main point.\n\n"
            "For each section:\n"
            "- Open with the direct answer or key fact\n"
            "- Follow with the supporting detail\n"
            '- Signal conclusions with phrases like "In short,"'
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.EASY,
        estimated_time="1-2 hours",
        expected_impact="Improve citation rate by 15-25%",
    )


def _competitors(ctx: AEORuleContext) -> AEORecommendation | None:
    if not ctx.top_competitors:
        return None
    ranked = "\n".join(f"{i}. {domain}" for i, domain in enumerate(ctx.top_competitors, 1))
    return AEORecommendation(
        id="aeo-4",
        title="Study What Competitors Are Doing Right",
        description=(
            f"These sites were cited most often instead of you:\n\n{ranked}\n\n"
            "Review their pages for:\n"
            "- How they structure answers\n"
            "- Which schema markup they use\n"
            "- How they show expertise"
        ),
        priority=Priority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time="1 hour",
        expected_impact="Learn citation-winning strategies",
    )


def _uncited_prompts(ctx: AEORuleContext) -> AEORecommendation | None:
    if not ctx.uncited_prompts:
        return None
    examples = " and ".join(f'"{p.text}"' for p in ctx.uncited_prompts[:2])
    return AEORecommendation(
        id="aeo-5",
        title="Create Content for Uncited Prompts",
        description=(
            f"No assistant cited you for prompts like {examples}.\n\n"
            "Give each of these questions a dedicated page or section:\n"
            "- Use the question itself as the heading\n"
            "- Answer it clearly and with authority\n"
            "- Back the answer with data and examples"
        ),
        priority=Priority.HIGH,
        difficulty=Difficulty.MEDIUM,
        estimated_time="2-3 hours per prompt",
        expected_impact="Target specific citation opportunities",
        related_prompts=tuple(p.id for p in ctx.uncited_prompts),
    )


def _low_readability(ctx: AEORuleContext) -> AEORecommendation | None:
    if ctx.content.readability_score >= LOW_READABILITY:
        return None
    return AEORecommendation(
        id="aeo-6",
        title="Simplify Your Writing for AI",
        description=(
            "Dense writing is harder for assistants to extract and cite.\n\n"
            "Improve readability by:\n"
            "- Keeping sentences to 15-20 words\n"
            "- Replacing jargon with everyday terms\n"
            "- Splitting long paragraphs\n"
            "- Using bullet points for lists"
        ),
        priority=Priority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time="1-2 hours",
        expected_impact="Improve citation accuracy by 10-15%",
    )


AEO_RULES = (
    _low_citation_rate,
    _low_schema,
    _low_bluf,
    _competitors,
    _uncited_prompts,
    _low_readability,
)


def generate_aeo_recommendations(
    ctx: AEORuleContext,
    limit: int = MAX_RECOMMENDATIONS,
) -> list[AEORecommendation]:
    """Evaluate every AEO rule and rank the results."""
    found = [rec for rule in AEO_RULES if (rec := rule(ctx)) is not None]
    return rank_by_priority(found, limit=limit)
