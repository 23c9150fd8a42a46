"""LLM Discoverability Engine - Worker Package."""

# Lazy imports to avoid requiring all dependencies at import time
# Use explicit imports when these are needed:
# from worker.analysis.engine import AnalysisEngine, build_engine
# from worker.redis import get_async_redis, close_redis_pools

__all__ = [
    "AnalysisEngine",
    "build_engine",
    "get_async_redis",
    "close_redis_pools",
]


from typing import Any


def __getattr__(name: str) -> Any:
    """Lazy import for worker submodules."""
    if name in ("AnalysisEngine", "build_engine"):
        from worker.analysis.engine import AnalysisEngine, build_engine

        return locals()[name]
    elif name in ("get_async_redis", "close_redis_pools"):
        from worker.redis import close_redis_pools, get_async_redis

        return locals()[name]
    raise AttributeError(f"module 'worker' has no attribute '{name}'")
