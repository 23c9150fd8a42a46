"""Usage package: plan limits, usage stores, the usage policy and cost estimates."""

# Use explicit imports:
# from worker.usage.policy import Identity, UsagePolicy
# from worker.usage.store import InMemoryUsageStore, RedisUsageStore, build_usage_store
# from worker.usage.costs import MODELS, resolve_model, real_analysis_costs

__all__ = [
    # Models
    "PlanLimits",
    "PLAN_LIMITS",
    "RATE_LIMITS",
    "ANALYSIS_BASE_COST",
    "UsageRecord",
    "LimitCheck",
    # Stores
    "UsageStore",
    "InMemoryUsageStore",
    "RedisUsageStore",
    "build_usage_store",
    # Policy
    "Identity",
    "UsagePolicy",
    # Costs
    "ModelConfig",
    "MODELS",
    "DEFAULT_MODEL",
    "CostInfo",
    "TokenUsage",
    "resolve_model",
    "estimate_tokens",
    "calculate_costs",
]
