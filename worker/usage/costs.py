"""Model catalogue and per-analysis cost estimates.

Costs are per 1K tokens in USD. Real analyses are priced from a token
estimate, not from provider invoices.
"""

from dataclasses import dataclass, field

import structlog

from worker.observation.models import ProviderName
from worker.scoring.metrics import round_half_up

logger = structlog.get_logger(__name__)

CRAWLING_COST = 0.03
EMBEDDING_COST_PER_1K = 0.0001
SIMULATED_ANALYSIS_COST = 0.001

CONTENT_TOKENS = 2000  # Average page content
SYSTEM_PROMPT_TOKENS = 500
TOKENS_PER_KEYWORD_CHAR = 1.3
OUTPUT_TOKENS = 800  # Typical insights response
EMBEDDING_TOKEN_RATIO = 0.75


@dataclass(frozen=True)
class ModelConfig:
    """An insights model and its pricing."""

    key: str
    provider: ProviderName
    name: str
    input_cost: float
    output_cost: float
    embedding_cost: float = EMBEDDING_COST_PER_1K
    web_crawling: bool = True
    structured_output: bool = True
    semantic_analysis: bool = True


MODELS: dict[str, ModelConfig] = {
    m.key: m
    for m in (
        ModelConfig("gpt-4", ProviderName.OPENAI, "GPT-4", 0.03, 0.06),
        ModelConfig("gpt-4-professional", ProviderName.OPENAI, "GPT-4 Professional", 0.04, 0.08),
        ModelConfig("claude-3-opus", ProviderName.ANTHROPIC, "Claude 3 Opus", 0.015, 0.075),
        ModelConfig("claude-3-sonnet", ProviderName.ANTHROPIC, "Claude 3 Sonnet", 0.003, 0.015),
        ModelConfig("claude-3-haiku", ProviderName.ANTHROPIC, "Claude 3 Haiku", 0.00025, 0.00125),
        ModelConfig(
            "perplexity-online",
            ProviderName.PERPLEXITY,
            "Perplexity Online",
            0.002,
            0.01,
            structured_output=False,
        ),
        ModelConfig(
            "perplexity-offline",
            ProviderName.PERPLEXITY,
            "Perplexity Offline",
            0.001,
            0.005,
            web_crawling=False,
            structured_output=False,
        ),
    )
}

DEFAULT_MODEL = "gpt-4-professional"


def resolve_model(model_key: str | None) -> ModelConfig:
    """Look up a model, falling back to DEFAULT_MODEL with a warning."""
    model = MODELS.get(model_key or "")
    if model is None:
        logger.warning("unknown_model_using_default", model_key=model_key, default=DEFAULT_MODEL)
        return MODELS[DEFAULT_MODEL]
    return model


@dataclass(frozen=True)
class TokenUsage:
    input: int = 0
    output: int = 0
    embeddings: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"input": self.input, "output": self.output, "embeddings": self.embeddings}


@dataclass(frozen=True)
class CostInfo:
    """What an analysis cost, with the lines that make up the total."""

    total_cost: float
    breakdown: dict[str, float] = field(default_factory=dict)
    tokens_used: TokenUsage = field(default_factory=TokenUsage)
    billable: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_cost": self.total_cost,
            "breakdown": dict(self.breakdown),
            "tokens_used": self.tokens_used.to_dict(),
            "billable": self.billable,
        }


def estimate_tokens(keywords: list[str]) -> TokenUsage:
    keyword_tokens = len(" ".join(keywords)) * TOKENS_PER_KEYWORD_CHAR
    return TokenUsage(
        input=round_half_up(CONTENT_TOKENS + keyword_tokens + SYSTEM_PROMPT_TOKENS),
        output=OUTPUT_TOKENS,
        embeddings=round_half_up(CONTENT_TOKENS * EMBEDDING_TOKEN_RATIO),
    )


def calculate_costs(tokens: TokenUsage, model: ModelConfig) -> CostInfo:
    """Price a real analysis; every line rounded to 3 decimals."""
    embeddings = tokens.embeddings / 1000 * model.embedding_cost
    insights = tokens.input / 1000 * model.input_cost + tokens.output / 1000 * model.output_cost
    total = round(CRAWLING_COST + embeddings + insights, 3)
    return CostInfo(
        total_cost=total,
        breakdown={
            "crawling": CRAWLING_COST,
            "embeddings": round(embeddings, 3),
            "insights": round(insights, 3),
            "total": total,
        },
        tokens_used=tokens,
    )


def real_analysis_costs(keywords: list[str], model: ModelConfig) -> CostInfo:
    return calculate_costs(estimate_tokens(keywords), model)


def simulated_costs() -> CostInfo:
    """Nominal, non-billable cost of a simulated analysis."""
    return CostInfo(
        total_cost=SIMULATED_ANALYSIS_COST,
        breakdown={
            "crawling": 0.0,
            "embeddings": 0.0,
            "insights": 0.0,
            "total": SIMULATED_ANALYSIS_COST,
        },
        billable=False,
    )


def aeo_costs(citation_total: float) -> CostInfo:
    """Real AEO cost: the crawl plus whatever the citation checks charged."""
    total = round(CRAWLING_COST + citation_total, 3)
    return CostInfo(
        total_cost=total,
        breakdown={
            "crawling": CRAWLING_COST,
            "citation_checks": round(citation_total, 3),
            "total": total,
        },
    )


def simulated_aeo_costs() -> CostInfo:
    return CostInfo(
        total_cost=0.0,
        breakdown={"crawling": 0.0, "citation_checks": 0.0, "total": 0.0},
        billable=False,
    )
