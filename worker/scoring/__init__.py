"""Scoring package: discoverability metrics, insight text and page issues."""

# Use explicit imports when needed:
# from worker.scoring.metrics import Metrics, compute_metrics, calculate_predicted_rank
# from worker.scoring.insights import generate_insights_from_crawl, generate_issues_from_crawl

__all__ = [
    # Metrics
    "Metrics",
    "METRIC_NAMES",
    "HIGH_VALUE_SCHEMAS",
    "compute_metrics",
    "calculate_overall_score",
    "calculate_predicted_rank",
    "category_from_score",
    "round_half_up",
    # Insights
    "Issue",
    "IssueType",
    "generate_insights_from_crawl",
    "generate_issues_from_crawl",
    "generate_simulated_insights",
]
