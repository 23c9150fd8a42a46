"""Tests for the crawl-based recommendation engine."""

import pytest

from tests.fixtures import bare_crawl, make_crawl
from worker.crawler.models import CrawlData
from worker.fixes.models import (
    MAX_RECOMMENDATIONS,
    Difficulty,
    Priority,
    Recommendation,
    rank_recommendations,
)
from worker.fixes.recommendations import (
    CRAWL_RULES,
    RecommendationEngine,
    RecommendationRule,
    compute_recommendations,
)
from worker.scoring.metrics import compute_metrics


def _ids(crawl: CrawlData) -> list[str]:
    return [r.id for r in compute_recommendations(crawl, compute_metrics(crawl))]


def _candidate_ids(crawl: CrawlData) -> list[str]:
    engine = RecommendationEngine()
    return [r.id for r in engine.candidates(crawl, compute_metrics(crawl))]


def _rec(rec_id: str, priority: Priority, impact: int) -> Recommendation:
    return Recommendation(
        id=rec_id,
        title=rec_id,
        description="",
        priority=priority,
        difficulty=Difficulty.EASY,
        estimated_time="5 minutes",
        expected_impact=impact,
    )


class TestRecommendationModel:
    """Tests for Recommendation and ranking."""

    def test_impact_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            _rec("bad", Priority.HIGH, 0)

    def test_to_dict(self) -> None:
        d = _rec("a", Priority.MEDIUM, 7).to_dict()

        assert d["priority"] == "medium"
        assert d["difficulty"] == "easy"
        assert d["expected_impact"] == 7

    def test_rank_by_priority_then_impact(self) -> None:
        """High before medium before low, larger impact first within a tier."""
        ranked = rank_recommendations(
            [
                _rec("low", Priority.LOW, 50),
                _rec("med-small", Priority.MEDIUM, 3),
                _rec("high-small", Priority.HIGH, 5),
                _rec("med-big", Priority.MEDIUM, 30),
                _rec("high-big", Priority.HIGH, 20),
            ]
        )

        assert [r.id for r in ranked] == ["high-big", "high-small", "med-big", "med-small", "low"]

    def test_rank_keeps_input_order_on_ties(self) -> None:
        ranked = rank_recommendations(
            [_rec("first", Priority.HIGH, 10), _rec("second", Priority.HIGH, 10)]
        )

        assert [r.id for r in ranked] == ["first", "second"]

    def test_rank_caps_length(self) -> None:
        recs = [_rec(str(i), Priority.LOW, i + 1) for i in range(10)]

        assert len(rank_recommendations(recs)) == MAX_RECOMMENDATIONS
        assert len(rank_recommendations(recs, limit=2)) == 2


class TestCrawlRules:
    """Each rule fires on its condition and only then."""

    def test_well_formed_page_only_gets_faq_suggestion(self) -> None:
        """The reference page asks two questions without FAQPage schema."""
        assert _ids(make_crawl()) == ["schema-faq"]

    def test_empty_page_top_six(self) -> None:
        """Six high-priority fixes win, ties kept in rule order."""
        assert _ids(bare_crawl()) == [
            "schema-1",
            "bluf-1",
            "keyword-title",
            "tech-mobile",
            "heading-h1",
            "meta-desc",
        ]

    def test_empty_page_candidates(self) -> None:
        """Every applicable rule fires before ranking."""
        assert _candidate_ids(bare_crawl()) == [
            "schema-1",
            "bluf-1",
            "keyword-title",
            "meta-desc",
            "tech-mobile",
            "content-length",
            "content-readability",
            "heading-h1",
            "tech-og",
        ]

    def test_faq_suppressed_by_faq_schema(self) -> None:
        crawl = make_crawl(schemaMarkup=[{"type": "FAQPage"}])

        assert "schema-faq" not in _candidate_ids(crawl)

    def test_faq_needs_two_questions(self) -> None:
        crawl = make_crawl(
            headings=[
                {"level": 1, "text": "Fresh bread", "hasDirectAnswer": True},
                {"level": 2, "text": "Why sourdough?", "hasDirectAnswer": True},
            ]
        )

        assert "schema-faq" not in _candidate_ids(crawl)

    def test_short_meta_description(self) -> None:
        recs = _candidate_ids(make_crawl(metaDescription="Fresh bread."))

        assert "meta-desc" in recs
        assert "keyword-meta" not in recs

    def test_meta_without_keyword(self) -> None:
        crawl = make_crawl(
            keywordAnalysis={
                "titleContainsKeyword": True,
                "h1ContainsKeyword": True,
                "metaContainsKeyword": False,
                "keywordDensity": 2.0,
            }
        )
        recs = compute_recommendations(crawl, compute_metrics(crawl))
        meta = next(r for r in recs if r.id == "keyword-meta")

        assert meta.priority == Priority.MEDIUM
        assert meta.expected_impact == 8

    def test_multiple_h1(self) -> None:
        crawl = make_crawl(
            headings=[
                {"level": 1, "text": "One", "hasDirectAnswer": True},
                {"level": 1, "text": "Two", "hasDirectAnswer": True},
            ]
        )

        assert "heading-h1-multiple" in _candidate_ids(crawl)
        assert "heading-h1" not in _candidate_ids(crawl)

    def test_long_page_without_subheadings(self) -> None:
        crawl = make_crawl(
            headings=[{"level": 1, "text": "Fresh bread", "hasDirectAnswer": True}],
        )

        assert "heading-structure" in _candidate_ids(crawl)

    def test_short_page_needs_no_subheadings(self) -> None:
        crawl = bare_crawl(contentStats={"wordCount": 400})

        assert "heading-structure" not in _candidate_ids(crawl)

    def test_thin_content_mentions_missing_words(self) -> None:
        crawl = make_crawl(contentStats={"wordCount": 300, "readabilityScore": 70})
        recs = compute_recommendations(crawl, compute_metrics(crawl))
        thin = next(r for r in recs if r.id == "content-length")

        assert "300 words" in thin.description
        assert "700+ words" in thin.description

    def test_answer_first_threshold(self) -> None:
        """BLUF of exactly 60 passes."""
        headings = [
            {"level": 2, "text": f"Section {i}", "hasDirectAnswer": i < 3} for i in range(5)
        ]

        assert "bluf-1" not in _candidate_ids(make_crawl(headings=headings))

    def test_answer_first_below_threshold(self) -> None:
        headings = [
            {"level": 2, "text": f"Section {i}", "hasDirectAnswer": i < 2} for i in range(5)
        ]
        crawl = make_crawl(headings=headings)
        recs = RecommendationEngine().candidates(crawl, compute_metrics(crawl))
        bluf = next(r for r in recs if r.id == "bluf-1")

        assert bluf.description.startswith("3 of your 5 sections")


class TestRecommendationEngine:
    """Tests for the engine itself."""

    def test_deterministic(self) -> None:
        """Identical input gives identical output."""
        crawl = bare_crawl()
        metrics = compute_metrics(crawl)

        first = compute_recommendations(crawl, metrics)
        second = compute_recommendations(crawl, metrics)

        assert first == second

    def test_never_more_than_six(self) -> None:
        assert len(compute_recommendations(bare_crawl(), compute_metrics(bare_crawl()))) <= 6

    def test_rules_registered_in_order(self) -> None:
        assert [rule.name for rule in CRAWL_RULES] == [
            "schema",
            "faq_opportunity",
            "answer_first",
            "title_keyword",
            "meta_description",
            "mobile_viewport",
            "thin_content",
            "readability",
            "h1",
            "subheadings",
            "open_graph",
        ]

    def test_custom_rule_battery(self) -> None:
        """Engines can run an arbitrary rule list with its own cap."""
        always = RecommendationRule(
            name="always",
            check=lambda ctx: _rec(f"always-{ctx.metrics.overall}", Priority.LOW, 1),
        )
        never = RecommendationRule(name="never", check=lambda ctx: None)
        engine = RecommendationEngine(rules=[never, always], max_recommendations=1)
        crawl = make_crawl()

        recs = engine.recommend(crawl, compute_metrics(crawl))

        assert [r.id for r in recs] == ["always-74"]
