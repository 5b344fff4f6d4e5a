"""Tests for the signal collection run."""

import json
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine

from competitor_intel import db_engine
from competitor_intel.aggregator import gather_competitor_news
from competitor_intel.classifier import analyze_signal
from competitor_intel.models import Competitor, ItemStatus, NewsArticle, SignalAnalysis, UserPreferences
from competitor_intel.orm_models import Base


@pytest.fixture
def temp_db():
    """Create a temporary in-memory database for testing."""
    test_engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(test_engine)
    db_engine.set_engine(test_engine)
    yield test_engine
    db_engine.reset_engine()


@pytest.fixture
def acme(temp_db):
    """A competitor with no feeds, owned by user 1."""
    from competitor_intel.database import get_competitors_by_ids, insert_competitor

    competitor_id = insert_competitor(Competitor(user_id=1, name="Acme"))
    return get_competitors_by_ids([competitor_id])[competitor_id]


def _article(title: str, url: str, description: str = "") -> NewsArticle:
    return NewsArticle(title=title, url=url, source="Example News", published_at=1705312800,
                       description=description)


SERIES_B = _article("Acme raises $50M Series B", "https://news.example/acme-series-b")


def _unreachable_llm(template_path, params):
    raise ConnectionError("LLM backend unreachable")


def _analyze_offline(competitor_name, article):
    return analyze_signal(competitor_name, article, llm=_unreachable_llm)


def _gather_from_search(*articles):
    """Gather function backed by a stubbed news search."""
    return lambda competitor: gather_competitor_news(competitor, fetch_news=lambda name: list(articles))


def _all_signals(user_id=1):
    from competitor_intel.database import get_recent_signals

    return get_recent_signals(user_id, 0)


class TestCollectSignals:
    """Tests for collect_signals function."""

    def test_end_to_end_with_fallback_classification(self, acme):
        """Test a funding article classified without the LLM and stored."""
        from competitor_intel.collector import collect_signals
        from competitor_intel.database import upsert_user_preferences
        from competitor_intel.hashing import article_content_hash

        upsert_user_preferences(UserPreferences(user_id=1, signal_types=["funding"]))

        report = collect_signals(gather=_gather_from_search(SERIES_B), analyze=_analyze_offline)

        assert report.signals_created == 1
        signals = _all_signals()
        assert len(signals) == 1
        signal = signals[0]
        assert signal.competitor_id == acme.id
        assert signal.user_id == 1
        assert signal.signal_type == "funding"
        assert signal.sentiment == "neutral"
        assert signal.is_high_priority is False
        assert signal.notified_at is None
        assert signal.summary == SERIES_B.title
        assert signal.source_name == "Example News"
        assert signal.published_at == 1705312800
        assert signal.content_hash == article_content_hash(SERIES_B)

    def test_second_run_creates_nothing(self, acme):
        """Test that re-running with the same sources stores no new signals."""
        from competitor_intel.collector import collect_signals

        gather = _gather_from_search(SERIES_B, _article("Acme hires CFO", "https://news.example/cfo"))

        first = collect_signals(gather=gather, analyze=_analyze_offline)
        second = collect_signals(gather=gather, analyze=_analyze_offline)

        assert first.signals_created == 2
        assert second.signals_created == 0
        assert {r.status for r in second.results} == {ItemStatus.DUPLICATE}
        assert len(_all_signals()) == 2

    def test_duplicates_are_not_classified(self, acme):
        """Test that a known article never reaches the classifier again."""
        from competitor_intel.collector import collect_signals

        calls = []

        def analyze(name, article):
            calls.append(article.title)
            return _analyze_offline(name, article)

        collect_signals(gather=_gather_from_search(SERIES_B), analyze=analyze)
        collect_signals(gather=_gather_from_search(SERIES_B), analyze=analyze)

        assert calls == [SERIES_B.title]

    def test_same_article_for_two_competitors_stored_once(self, temp_db):
        """Test that the content hash is global, not per competitor."""
        from competitor_intel.collector import collect_signals
        from competitor_intel.database import insert_competitor

        insert_competitor(Competitor(user_id=1, name="Acme"))
        insert_competitor(Competitor(user_id=2, name="Globex"))

        report = collect_signals(gather=_gather_from_search(SERIES_B), analyze=_analyze_offline)

        assert report.signals_created == 1
        assert [r.status for r in report.results] == [ItemStatus.CREATED, ItemStatus.DUPLICATE]

    def test_no_preferences_keeps_everything(self, acme):
        """Test that a user without preferences gets every signal type."""
        from competitor_intel.collector import collect_signals

        article = _article("Acme opens office in Berlin", "https://news.example/berlin")

        report = collect_signals(gather=_gather_from_search(article), analyze=_analyze_offline)

        assert report.signals_created == 1
        assert _all_signals()[0].signal_type == "other"

    def test_filtered_by_preferences(self, acme):
        """Test that unselected signal types are not stored."""
        from competitor_intel.collector import collect_signals
        from competitor_intel.database import upsert_user_preferences

        upsert_user_preferences(UserPreferences(user_id=1, signal_types=["product_launch"]))

        report = collect_signals(gather=_gather_from_search(SERIES_B), analyze=_analyze_offline)

        assert report.signals_created == 0
        assert report.results[0].status == ItemStatus.FILTERED
        assert _all_signals() == []

    def test_uses_llm_analysis(self, acme):
        """Test that a working LLM's analysis is what gets stored."""
        from competitor_intel.collector import collect_signals

        response = json.dumps({
            "summary": "Acme raised a large round.",
            "signal_type": "funding",
            "sentiment": "positive",
            "is_high_priority": True,
        })

        collect_signals(
            gather=_gather_from_search(SERIES_B),
            analyze=lambda name, article: analyze_signal(name, article, llm=lambda path, params: response),
        )

        signal = _all_signals()[0]
        assert signal.summary == "Acme raised a large round."
        assert signal.sentiment == "positive"
        assert signal.is_high_priority is True

    def test_failing_article_does_not_stop_others(self, acme):
        """Test that an error for one article is recorded and the next one processed."""
        from competitor_intel.collector import collect_signals

        bad = _article("Broken article", "https://news.example/broken")

        def analyze(name, article):
            if article is bad:
                raise RuntimeError("boom")
            return _analyze_offline(name, article)

        report = collect_signals(gather=_gather_from_search(bad, SERIES_B), analyze=analyze)

        assert [r.status for r in report.results] == [ItemStatus.FAILED, ItemStatus.CREATED]
        assert report.results[0].reason == "boom"
        assert len(report.failures) == 1

    def test_failing_competitor_does_not_stop_others(self, temp_db):
        """Test that a fetch error for one competitor does not affect the next."""
        from competitor_intel.collector import collect_signals
        from competitor_intel.database import insert_competitor

        insert_competitor(Competitor(user_id=1, name="Acme"))
        insert_competitor(Competitor(user_id=1, name="Globex"))

        def gather(competitor):
            if competitor.name == "Acme":
                raise RuntimeError("search down")
            return [_article("Globex launches product", "https://news.example/globex")]

        report = collect_signals(gather=gather, analyze=_analyze_offline)

        assert report.results[0].status == ItemStatus.FAILED
        assert report.results[0].label == "Acme"
        assert report.signals_created == 1

    def test_results_are_labelled_by_competitor_and_title(self, acme):
        """Test the labels used in the run report."""
        from competitor_intel.collector import collect_signals
        from competitor_intel.database import upsert_user_preferences

        upsert_user_preferences(UserPreferences(user_id=1, signal_types=["product_launch"]))

        report = collect_signals(gather=_gather_from_search(SERIES_B), analyze=_analyze_offline)

        result = report.results[0]
        assert result.status == ItemStatus.FILTERED
        assert result.label == "Acme: Acme raises $50M Series B"
        assert result.reason == "funding not selected"

    def test_listing_competitors_failure_propagates(self, temp_db):
        """Test that the run aborts if competitors cannot be listed."""
        from competitor_intel.collector import collect_signals

        with patch("competitor_intel.collector.list_competitors", side_effect=RuntimeError("db down")):
            with pytest.raises(RuntimeError, match="db down"):
                collect_signals(gather=_gather_from_search(SERIES_B), analyze=_analyze_offline)

    def test_no_competitors(self, temp_db):
        """Test that an empty database gives an empty report."""
        from competitor_intel.collector import collect_signals

        report = collect_signals(gather=_gather_from_search(SERIES_B), analyze=_analyze_offline)

        assert report.results == []
        assert report.signals_created == 0


class TestProcessArticle:
    """Tests for process_article function."""

    def test_concurrent_insert_counts_as_duplicate(self, acme):
        """Test that losing an insert race to another run is a duplicate, not an error."""
        from competitor_intel.collector import process_article

        analysis = SignalAnalysis("summary", "funding", "neutral", False)
        process_article(acme, SERIES_B, lambda name, article: analysis)

        # The pre-check misses the row, as if another run inserted it just after
        with patch("competitor_intel.collector.signal_exists", return_value=False):
            result = process_article(acme, SERIES_B, lambda name, article: analysis)

        assert result.status == ItemStatus.DUPLICATE
        assert len(_all_signals()) == 1
