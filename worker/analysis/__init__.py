"""Analysis package: result records, the simulator and the orchestrating engine."""

# Use explicit imports:
# from worker.analysis.engine import AnalysisEngine, build_engine
# from worker.analysis.models import Analysis, AEOAnalysis, Identity
# from worker.analysis.simulation import Simulator

__all__ = [
    # Models
    "Identity",
    "Analysis",
    "AEOAnalysis",
    "CrawlSummary",
    "CostInfo",
    "ContentAnalysis",
    # Simulation
    "Simulator",
    # Engine
    "AnalysisEngine",
    "build_engine",
]
