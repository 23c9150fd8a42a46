"""Simulated citation evidence for demo and trial plans."""

import random

from worker.observation.models import (
    CitationResult,
    CompetitorCitation,
    ContentAnalysis,
    PromptSpec,
    ProviderName,
    active_providers,
)

SIMULATED_COMPETITORS = (
    "hubspot.com",
    "mailchimp.com",
    "salesforce.com",
    "zendesk.com",
    "intercom.com",
    "drift.com",
    "freshworks.com",
    "zoho.com",
)

SIMULATED_CITE_PROBABILITY = 0.4
SIMULATED_RESULT_COST = 0.02

_SIMULATED_MODELS = {
    ProviderName.OPENAI: "gpt-4o",
    ProviderName.ANTHROPIC: "claude-3-haiku",
}


def simulated_model(provider: ProviderName) -> str:
    return _SIMULATED_MODELS.get(provider, "sonar")


def simulate_citation_results(
    prompts: list[PromptSpec],
    website: str,
    brand_name: str | None,
    providers: list[ProviderName],
    rng: random.Random,
) -> list[CitationResult]:
    """One fake result per prompt x active provider."""
    results: list[CitationResult] = []
    subject = brand_name or website

    for prompt in prompts:
        for provider in active_providers(providers):
            is_cited = rng.random() < SIMULATED_CITE_PROBABILITY
            competitors = rng.sample(SIMULATED_COMPETITORS, rng.randint(2, 4))
            results.append(
                CitationResult(
                    prompt_id=prompt.id,
                    prompt=prompt.text,
                    provider=provider,
                    model_used=simulated_model(provider),
                    response=(
                        f"[Simulated {provider.value} response for demo purposes. "
                        f'This is how the AI might answer "{prompt.text}"]'
                    ),
                    is_cited=is_cited,
                    citation_context=(
                        f"...{subject} offers excellent solutions for this..."
                        if is_cited
                        else None
                    ),
                    competitors_cited=[
                        CompetitorCitation(
                            domain=domain,
                            context=f"{domain} was mentioned as a leading solution...",
                            position=position,
                        )
                        for position, domain in enumerate(competitors, 1)
                    ],
                    tokens_used=rng.randint(500, 999),
                    cost=SIMULATED_RESULT_COST,
                )
            )

    return results


def simulate_content_analysis(rng: random.Random) -> ContentAnalysis:
    return ContentAnalysis(
        bluf_score=rng.randint(40, 69),
        schema_score=rng.randint(20, 59),
        readability_score=rng.randint(50, 79),
        content_depth=rng.randint(35, 69),
    )
