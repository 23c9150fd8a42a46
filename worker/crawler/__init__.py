"""Crawler package: crawl payload models and crawl clients."""

# Use explicit imports:
# from worker.crawler.models import CrawlData, CrawlHeading
# from worker.crawler.client import CrawlClient, RemoteCrawlClient, MockCrawlClient

__all__ = [
    # Models
    "CrawlData",
    "CrawlHeading",
    "SchemaMarkup",
    "ContentStats",
    "TechnicalSignals",
    "KeywordAnalysis",
    "PageSummary",
    "AggregatedStats",
    "CRAWL_SCHEMA_VERSION",
    # Clients
    "CrawlClient",
    "RemoteCrawlClient",
    "MockCrawlClient",
]
