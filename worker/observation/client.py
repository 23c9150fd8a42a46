"""Citation clients - ask AI providers whether they cite a website."""

from abc import ABC, abstractmethod

import structlog
from pydantic import ValidationError as PydanticValidationError

from api.exceptions import CitationCheckError, ExternalServiceError
from worker.functions import FunctionInvoker
from worker.observation.models import (
    CitationCheckResult,
    CitationResult,
    PromptSpec,
    ProviderName,
    active_providers,
)

logger = structlog.get_logger(__name__)


class CitationClient(ABC):
    """Abstract citation-check collaborator."""

    @abstractmethod
    async def check(
        self,
        prompts: list[PromptSpec],
        website: str,
        brand_name: str | None,
        providers: list[ProviderName],
    ) -> CitationCheckResult:
        """Run every prompt against every provider. Raises CitationCheckError on failure."""
        ...


class RemoteCitationClient(CitationClient):
    """Checks citations through the ``check-citations`` remote function."""

    def __init__(self, invoker: FunctionInvoker, function_name: str = "check-citations"):
        self.invoker = invoker
        self.function_name = function_name

    async def check(
        self,
        prompts: list[PromptSpec],
        website: str,
        brand_name: str | None,
        providers: list[ProviderName],
    ) -> CitationCheckResult:
        body = {
            "prompts": [{"id": p.id, "text": p.text} for p in prompts],
            "website": website,
            "brandName": brand_name,
            "providers": [p.value for p in active_providers(providers)],
        }
        try:
            payload = await self.invoker.invoke(self.function_name, body)
        except CitationCheckError:
            raise
        except ExternalServiceError as e:
            raise CitationCheckError(e.message) from e

        if not payload.get("success"):
            raise CitationCheckError(payload.get("error") or "Citation check failed")

        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise CitationCheckError("Malformed citation payload: data is not an object")
        summary = data.get("summary") or {}
        if not isinstance(summary, dict):
            raise CitationCheckError("Malformed citation payload: summary is not an object")
        try:
            result = CitationCheckResult(
                results=data.get("results") or [],
                total_cost=summary.get("totalCost", 0.0),
            )
        except PydanticValidationError as e:
            raise CitationCheckError(
                f"Malformed citation payload: {e.error_count()} invalid fields"
            ) from e

        logger.info(
            "citations_checked",
            website=website,
            prompts=len(prompts),
            results=len(result.results),
            cited=sum(1 for r in result.results if r.is_cited),
            total_cost=result.total_cost,
        )
        return result


class MockCitationClient(CitationClient):
    """In-memory citation client for tests and local development."""

    def __init__(
        self,
        results: list[CitationResult] | None = None,
        total_cost: float = 0.0,
        should_fail: bool = False,
    ):
        self.results = results or []
        self.total_cost = total_cost
        self.should_fail = should_fail
        self.calls: list[dict] = []

    async def check(
        self,
        prompts: list[PromptSpec],
        website: str,
        brand_name: str | None,
        providers: list[ProviderName],
    ) -> CitationCheckResult:
        self.calls.append(
            {
                "prompts": list(prompts),
                "website": website,
                "brand_name": brand_name,
                "providers": list(providers),
            }
        )
        if self.should_fail:
            raise CitationCheckError("Simulated citation check failure")
        return CitationCheckResult(results=list(self.results), total_cost=self.total_cost)
