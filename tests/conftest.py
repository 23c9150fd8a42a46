"""Pytest configuration and fixtures."""

import os
import random
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment before any app code runs
os.environ["ENV"] = "test"
os.environ.pop("REDIS_URL", None)
os.environ.pop("FUNCTIONS_BASE_URL", None)

from api.config import get_settings  # noqa: E402
from worker.analysis.engine import AnalysisEngine  # noqa: E402
from worker.analysis.simulation import Simulator  # noqa: E402
from worker.crawler.client import MockCrawlClient  # noqa: E402
from worker.observation.client import MockCitationClient  # noqa: E402
from worker.usage.policy import UsagePolicy  # noqa: E402
from worker.usage.store import InMemoryUsageStore  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
def usage_store() -> InMemoryUsageStore:
    return InMemoryUsageStore()


@pytest.fixture
def policy(usage_store: InMemoryUsageStore) -> UsagePolicy:
    return UsagePolicy(usage_store, privileged_emails=frozenset({"demo@example.com"}))


@pytest.fixture
def crawl_client() -> MockCrawlClient:
    return MockCrawlClient()


@pytest.fixture
def citation_client() -> MockCitationClient:
    return MockCitationClient()


@pytest.fixture
def engine(
    crawl_client: MockCrawlClient,
    citation_client: MockCitationClient,
    policy: UsagePolicy,
) -> AnalysisEngine:
    """Engine over mock collaborators with a seeded simulator."""
    return AnalysisEngine(
        crawl_client=crawl_client,
        citation_client=citation_client,
        policy=policy,
        simulator=Simulator(random.Random(42)),
    )


@pytest.fixture
async def client(engine: AnalysisEngine) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client wired to the mock engine."""
    from api.main import app

    original = app.state.engine
    app.state.engine = engine
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.state.engine = original
