"""Crawl clients - fetch structured page content for a website."""

from abc import ABC, abstractmethod

import structlog
from pydantic import ValidationError as PydanticValidationError

from api.exceptions import CrawlError, ExternalServiceError
from worker.crawler.models import CrawlData
from worker.functions import FunctionInvoker

logger = structlog.get_logger(__name__)


class CrawlClient(ABC):
    """Abstract crawl collaborator."""

    @abstractmethod
    async def crawl(self, url: str, keywords: list[str]) -> CrawlData:
        """Crawl a website. Raises CrawlError on any failure."""
        ...


class RemoteCrawlClient(CrawlClient):
    """Crawls through the ``crawl-website`` remote function."""

    def __init__(self, invoker: FunctionInvoker, function_name: str = "crawl-website"):
        self.invoker = invoker
        self.function_name = function_name

    async def crawl(self, url: str, keywords: list[str]) -> CrawlData:
        try:
            payload = await self.invoker.invoke(
                self.function_name,
                {"url": url, "keywords": keywords},
            )
        except CrawlError:
            raise
        except ExternalServiceError as e:
            raise CrawlError(e.message) from e

        if not payload.get("success") or not payload.get("data"):
            raise CrawlError(payload.get("error") or "Crawl returned no data")

        try:
            crawl = CrawlData.model_validate(payload["data"])
        except PydanticValidationError as e:
            raise CrawlError(f"Malformed crawl payload: {e.error_count()} invalid fields") from e

        logger.info(
            "crawl_succeeded",
            url=url,
            title=crawl.title,
            headings=len(crawl.headings),
            schemas=len(crawl.schema_markup),
            pages=crawl.pages_analyzed,
        )
        return crawl


class MockCrawlClient(CrawlClient):
    """In-memory crawl client for tests and local development."""

    def __init__(self, crawl_data: CrawlData | None = None, should_fail: bool = False):
        self.crawl_data = crawl_data
        self.should_fail = should_fail
        self.calls: list[tuple[str, list[str]]] = []

    async def crawl(self, url: str, keywords: list[str]) -> CrawlData:
        self.calls.append((url, list(keywords)))
        if self.should_fail:
            raise CrawlError("Simulated crawl failure")
        if self.crawl_data is None:
            return CrawlData(url=url)
        return self.crawl_data
