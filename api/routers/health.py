"""Health check endpoints."""

import time
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter
from pydantic import BaseModel, Field
from redis.asyncio import Redis

from api.config import get_settings

router = APIRouter(tags=["Health"])
logger = structlog.get_logger(__name__)

API_VERSION = "0.1.0"

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status: healthy, degraded, unhealthy")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str = Field(..., description="API version")
    uptime_seconds: int = Field(..., description="Server uptime in seconds")


class DependencyCheck(BaseModel):
    """Individual dependency check result."""

    status: str = Field(..., description="Status: healthy, unhealthy, skipped")
    latency_ms: float | None = Field(None, description="Check latency in milliseconds")
    error: str | None = Field(None, description="Error message if unhealthy")


class ReadyResponse(BaseModel):
    """Readiness check response with dependency status."""

    status: str = Field(..., description="Overall status")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str = Field(..., description="API version")
    uptime_seconds: int = Field(..., description="Server uptime in seconds")
    checks: dict[str, DependencyCheck] = Field(..., description="Individual dependency checks")


class ApiInfoResponse(BaseModel):
    """API information response."""

    name: str
    version: str
    env: str
    docs: str | None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns healthy if the API is running. Does not check dependencies.
    Use /ready for full dependency checks.
    """
    uptime = int(time.time() - _server_start_time)
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=API_VERSION,
        uptime_seconds=uptime,
    )


async def _check_redis() -> DependencyCheck:
    settings = get_settings()
    if not settings.redis_url:
        return DependencyCheck(status="skipped")

    start = time.perf_counter()
    redis = Redis.from_url(str(settings.redis_url), socket_timeout=2)
    try:
        await redis.ping()
    except Exception as e:
        logger.warning("redis_health_check_failed", error=str(e))
        return DependencyCheck(status="unhealthy", error=str(e))
    finally:
        await redis.aclose()

    latency_ms = (time.perf_counter() - start) * 1000
    return DependencyCheck(status="healthy", latency_ms=round(latency_ms, 2))


def _check_functions() -> DependencyCheck:
    settings = get_settings()
    if not settings.functions_base_url:
        return DependencyCheck(status="unhealthy", error="FUNCTIONS_BASE_URL is not configured")
    return DependencyCheck(status="healthy")


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check() -> ReadyResponse:
    """
    Readiness check with dependency verification.

    Checks:
    - Redis connectivity and latency (skipped when usage is kept in memory)
    - Remote function configuration
    """
    checks = {
        "redis": await _check_redis(),
        "functions": _check_functions(),
    }
    uptime = int(time.time() - _server_start_time)

    unhealthy_count = sum(1 for c in checks.values() if c.status == "unhealthy")
    active_count = sum(1 for c in checks.values() if c.status != "skipped")
    if unhealthy_count == 0:
        overall_status = "healthy"
    elif unhealthy_count < active_count:
        overall_status = "degraded"
    else:
        overall_status = "unhealthy"

    return ReadyResponse(
        status=overall_status,
        timestamp=datetime.now(UTC).isoformat(),
        version=API_VERSION,
        uptime_seconds=uptime,
        checks=checks,
    )


@router.get("/", response_model=ApiInfoResponse)
async def root() -> ApiInfoResponse:
    """Root endpoint with API information."""
    settings = get_settings()
    return ApiInfoResponse(
        name="LLM Discoverability Engine API",
        version=API_VERSION,
        env=settings.env,
        docs="/docs" if settings.debug else None,
    )
