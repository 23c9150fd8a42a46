"""Shared test factories."""

from tests.fixtures.factories import (
    FakeClock,
    bare_crawl,
    crawl_payload,
    make_citation,
    make_crawl,
    make_identity,
    make_prompts,
)

__all__ = [
    "FakeClock",
    "bare_crawl",
    "crawl_payload",
    "make_citation",
    "make_crawl",
    "make_identity",
    "make_prompts",
]
