"""Observation package: citation checks against AI providers and their aggregation."""

# Use explicit imports:
# from worker.observation.models import CitationResult, PromptSpec, ProviderName
# from worker.observation.client import RemoteCitationClient, MockCitationClient
# from worker.observation.aggregator import CitationAggregator, build_competitor_table

__all__ = [
    # Models
    "ProviderName",
    "PromptSpec",
    "CompetitorCitation",
    "CitationResult",
    "CitationCheckResult",
    "ContentAnalysis",
    "active_providers",
    # Clients
    "CitationClient",
    "RemoteCitationClient",
    "MockCitationClient",
    # Aggregation
    "CitationAggregator",
    "CitationAggregate",
    "CompetitorStanding",
    "CompetitorTable",
    "citation_rate",
    "count_competitors",
    "rank_competitors",
    "build_competitor_table",
    "uncited_prompts",
    "provider_citation_rates",
    "prompt_citation_rate",
    # Simulation
    "simulate_citation_results",
    "simulate_content_analysis",
]
