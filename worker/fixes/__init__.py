"""Recommendation package: crawl and citation (AEO) rule batteries."""

# Use explicit imports when needed:
# from worker.fixes.models import Recommendation, AEORecommendation, rank_recommendations
# from worker.fixes.recommendations import RecommendationEngine, compute_recommendations
# from worker.fixes.aeo import AEORuleContext, generate_aeo_recommendations

__all__ = [
    # Models
    "Priority",
    "Difficulty",
    "Recommendation",
    "AEORecommendation",
    "MAX_RECOMMENDATIONS",
    "rank_recommendations",
    "rank_by_priority",
    # Crawl rules
    "RuleContext",
    "RecommendationRule",
    "RecommendationEngine",
    "CRAWL_RULES",
    "compute_recommendations",
    # AEO rules
    "AEORuleContext",
    "AEO_RULES",
    "generate_aeo_recommendations",
]
