"""Tests for citation aggregation and competitor ranking."""

from tests.fixtures import make_citation, make_prompts
from worker.observation.aggregator import (
    CitationAggregator,
    build_competitor_table,
    citation_rate,
    count_competitors,
    prompt_citation_rate,
    provider_citation_rates,
    rank_competitors,
    uncited_prompts,
)
from worker.observation.models import ContentAnalysis, ProviderName


class TestCitationRate:
    """Tests for the headline citation rate."""

    def test_no_results(self) -> None:
        assert citation_rate([]) == 0.0

    def test_all_cited(self) -> None:
        results = [make_citation("p1", is_cited=True), make_citation("p2", is_cited=True)]

        assert citation_rate(results) == 100.0

    def test_none_cited(self) -> None:
        results = [make_citation("p1"), make_citation("p2")]

        assert citation_rate(results) == 0.0

    def test_counts_each_prompt_provider_pair(self) -> None:
        """One of four prompt x provider results cited is 25%."""
        results = [
            make_citation("p1", ProviderName.OPENAI, is_cited=True),
            make_citation("p1", ProviderName.ANTHROPIC),
            make_citation("p2", ProviderName.OPENAI),
            make_citation("p2", ProviderName.ANTHROPIC),
        ]

        assert citation_rate(results) == 25.0
        assert prompt_citation_rate(results) == 50.0

    def test_per_provider(self) -> None:
        results = [
            make_citation("p1", ProviderName.OPENAI, is_cited=True),
            make_citation("p2", ProviderName.OPENAI),
            make_citation("p1", ProviderName.PERPLEXITY, is_cited=True),
        ]

        assert provider_citation_rates(results) == {"openai": 50.0, "perplexity": 100.0}


class TestCompetitorRanking:
    """Tests for competitor counting and ordering."""

    def test_most_cited_ranks_first(self) -> None:
        """A domain cited three times beats domains cited once."""
        results = [
            make_citation("p1", competitors=["a.com", "x.com"]),
            make_citation("p2", competitors=["x.com", "b.com"]),
            make_citation("p3", competitors=["x.com"]),
        ]

        standings = rank_competitors(results)

        assert standings[0].domain == "x.com"
        assert standings[0].citation_count == 3
        assert standings[0].citation_rate == 100.0
        assert [s.domain for s in standings[1:]] == ["a.com", "b.com"]

    def test_order_independent(self) -> None:
        """Shuffling the results does not change the ranking."""
        results = [
            make_citation("p1", competitors=["c.com", "b.com"]),
            make_citation("p2", competitors=["b.com", "a.com"]),
            make_citation("p3", competitors=["a.com"]),
        ]

        forward = [s.domain for s in rank_competitors(results)]
        backward = [s.domain for s in rank_competitors(list(reversed(results)))]

        assert forward == backward == ["a.com", "b.com", "c.com"]

    def test_counts_occurrences(self) -> None:
        results = [
            make_citation("p1", competitors=["a.com", "a.com"]),
            make_citation("p2", competitors=["a.com"]),
        ]

        assert count_competitors(results)["a.com"] == 3

    def test_contexts_deduplicated(self) -> None:
        results = [
            make_citation("p1", competitors=["a.com"]),
            make_citation("p2", competitors=["a.com"]),
        ]

        assert rank_competitors(results)[0].contexts == ("a.com is popular",)

    def test_limit(self) -> None:
        results = [make_citation("p1", competitors=[f"{c}.com" for c in "abcdef"])]

        assert len(rank_competitors(results, limit=4)) == 4


class TestCompetitorTable:
    """Tests for the competitor table."""

    def test_user_tally(self) -> None:
        results = [
            make_citation("p1", is_cited=True, competitors=["a.com"]),
            make_citation("p2", competitors=["a.com", "b.com"]),
        ]

        table = build_competitor_table(results)

        assert table.total_queries == 2
        assert table.user_citation_count == 1
        assert table.user_citation_rate == 50.0
        assert table.top_domains() == ["a.com", "b.com"]

    def test_empty(self) -> None:
        table = build_competitor_table([])

        assert table.standings == []
        assert table.user_citation_rate == 0.0

    def test_to_dict_rounds_rates(self) -> None:
        results = [
            make_citation("p1", competitors=["a.com"]),
            make_citation("p2"),
            make_citation("p3"),
        ]

        d = build_competitor_table(results).to_dict()

        assert d["standings"][0]["citation_rate"] == 33.3
        assert d["user_citation_rate"] == 0.0


class TestUncitedPrompts:
    """Tests for uncited prompt detection."""

    def test_prompt_cited_by_any_provider_is_covered(self) -> None:
        prompts = make_prompts("p1", "p2", "p3")
        results = [
            make_citation("p1", ProviderName.OPENAI),
            make_citation("p1", ProviderName.ANTHROPIC, is_cited=True),
            make_citation("p2", ProviderName.OPENAI),
        ]

        assert [p.id for p in uncited_prompts(results, prompts)] == ["p2", "p3"]


class TestCitationAggregator:
    """Tests for the full aggregation."""

    def test_aggregate(self) -> None:
        prompts = make_prompts("p1", "p2")
        results = [
            make_citation("p1", competitors=["x.com", "y.com"]),
            make_citation("p2", competitors=["x.com"]),
        ]
        content = ContentAnalysis(
            bluf_score=80, schema_score=60, readability_score=70, content_depth=50
        )

        aggregate = CitationAggregator().aggregate(results, content, prompts)

        assert aggregate.overall_citation_rate == 0.0
        assert aggregate.competitor_table.top_domains() == ["x.com", "y.com"]
        assert [p.id for p in aggregate.uncited_prompts] == ["p1", "p2"]
        assert [r.id for r in aggregate.recommendations] == ["aeo-1", "aeo-5", "aeo-4"]

    def test_competitor_recommendation_matches_table(self) -> None:
        """The competitors named in advice are the table's top three."""
        results = [
            make_citation("p1", competitors=["d.com", "c.com", "b.com", "a.com"]),
            make_citation("p2", competitors=["d.com", "c.com"]),
            make_citation("p3", competitors=["d.com"]),
        ]

        aggregate = CitationAggregator().aggregate(
            results, ContentAnalysis.defaults(), make_prompts("p1", "p2", "p3")
        )
        advice = next(r for r in aggregate.recommendations if r.id == "aeo-4")

        assert "1. d.com\n2. c.com\n3. a.com" in advice.description
        assert aggregate.competitor_table.top_domains() == ["d.com", "c.com", "a.com"]
