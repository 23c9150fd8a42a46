"""Pydantic schemas package."""

# Use explicit imports:
# from api.schemas.analysis import AnalysisCreate, AEOAnalysisCreate
# from api.schemas.responses import SuccessResponse, ErrorResponse

__all__ = [
    "AnalysisCreate",
    "AEOAnalysisCreate",
    "PromptCreate",
    "ErrorDetail",
    "ErrorResponse",
    "SuccessResponse",
]
