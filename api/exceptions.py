"""Error taxonomy for the analysis engine and its HTTP surface."""

from datetime import datetime
from typing import Any

from fastapi import status


class DiscoverabilityError(Exception):
    """Base exception for the analysis engine."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(DiscoverabilityError):
    """Caller identity missing or unusable."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="authentication_error",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class _LimitError(DiscoverabilityError):
    """Shared shape of quota and rate errors: a reason plus an optional reset time."""

    def __init__(self, reason: str, code: str, reset_time: datetime | None = None):
        self.reason = reason
        self.reset_time = reset_time
        details: dict[str, Any] = {"reason": reason}
        if reset_time is not None:
            details["reset_time"] = reset_time.isoformat()
        super().__init__(
            message=reason,
            code=code,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details=details,
        )


class QuotaExceededError(_LimitError):
    """Monthly analysis count or budget exhausted. Retry after the period resets."""

    def __init__(self, reason: str = "Usage limit exceeded", reset_time: datetime | None = None):
        super().__init__(reason, code="quota_exceeded", reset_time=reset_time)


class RateLimitError(_LimitError):
    """Too many requests inside the sliding window."""

    def __init__(
        self,
        reason: str = "Rate limit exceeded. Please try again later.",
        reset_time: datetime | None = None,
    ):
        super().__init__(reason, code="rate_limited", reset_time=reset_time)


class ExternalServiceError(DiscoverabilityError):
    """External service error."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(
            message=f"{service}: {message}",
            code="external_service_error",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"service": service},
        )


class CrawlError(ExternalServiceError):
    """The crawl service failed or returned an unusable payload."""

    def __init__(self, message: str):
        super().__init__("crawl", message)


class CitationCheckError(ExternalServiceError):
    """The citation-check service failed or returned an unusable payload."""

    def __init__(self, message: str):
        super().__init__("citations", message)
