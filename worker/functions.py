"""Invoke named remote functions with a JSON body.

The crawler and the citation checker both run as remote functions behind
one base URL. The engine only needs "call function X with this body and
give me the parsed JSON back", so transport details stay here.
"""

import time
from typing import Any

import httpx
import structlog

from api.config import Settings
from api.exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)


class FunctionInvoker:
    """POSTs JSON bodies to ``{base_url}/{name}`` and returns the decoded response."""

    def __init__(
        self,
        base_url: str | None,
        api_key: str | None = None,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "FunctionInvoker":
        """Build an invoker from application settings."""
        return cls(
            base_url=settings.functions_base_url,
            api_key=settings.functions_api_key,
            timeout_seconds=settings.function_timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        return headers

    async def invoke(self, name: str, body: dict[str, Any]) -> dict[str, Any]:
        """
        Call a remote function and return its JSON object.

        Raises:
            ExternalServiceError: not configured, transport failure, timeout,
                non-2xx status, or a body that is not a JSON object.
        """
        if not self.base_url:
            raise ExternalServiceError(name, "Remote functions are not configured")

        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    f"{self.base_url}/{name}",
                    headers=self._headers(),
                    json=body,
                )
        except httpx.TimeoutException as e:
            raise ExternalServiceError(
                name, f"Request timed out after {self.timeout_seconds}s"
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(name, f"Request failed: {e}") from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "remote_function_called",
            function=name,
            status_code=response.status_code,
            latency_ms=round(latency_ms, 2),
        )

        if not response.is_success:
            raise ExternalServiceError(name, f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(name, "Response is not valid JSON") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(name, "Response is not a JSON object")
        return data
