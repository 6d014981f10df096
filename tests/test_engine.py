"""
Tests for the Cannibalization Engine

End-to-end runs over the shared fixtures: tier coordination, report
summary and serialization.
"""

from siteaudit.detection import CannibalizationEngine, analyze_cannibalization
from siteaudit.models import OverlapRisk, Severity, UrlType

from conftest import DALLAS, HOUSTON, make_item, make_market, make_page


class TestEngineRun:
    """Tests for a full engine run."""

    def test_mixed_markets(self, mixed_markets):
        report = analyze_cannibalization(mixed_markets, None, "https://www.acme.com/")

        assert report.domain == "acme.com"
        assert report.markets == [DALLAS, HOUSTON]

        assert len(report.serp_conflicts) == 1
        assert report.serp_conflicts[0].keyword == "water heater repair"
        assert report.serp_conflicts[0].severity == Severity.HIGH

        assert len(report.wrong_page_rankings) == 1
        assert report.wrong_page_rankings[0].page_type == UrlType.BLOG
        assert report.wrong_page_rankings[0].severity == Severity.HIGH

        assert len(report.ngram_overlaps) == 1
        assert report.ngram_overlaps[0].risk == OverlapRisk.HIGH
        assert len(report.exact_conflicts) == 1
        assert report.content_overlaps == []
        assert len(report.ranking_pages) == 5
        assert report.competing_keywords == []

    def test_summary(self, mixed_markets):
        summary = analyze_cannibalization(mixed_markets, None, "acme.com").summary

        assert summary.total_issues == 4
        assert summary.urgent_count == 1
        assert summary.searches_affected == 450
        assert summary.ranking_pages == 5

    def test_serp_conflict_keywords_not_repeated_as_wrong_page(self):
        markets = {DALLAS: make_market(make_item(
            "water heater repair",
            volume=50,
            matches=[("/blog/water-heater-guide", 4), ("/water-heater-repair", 9)],
        ))}
        report = analyze_cannibalization(markets, None, "acme.com")

        assert len(report.serp_conflicts) == 1
        assert report.serp_conflicts[0].wrong_page_winning is True
        assert report.wrong_page_rankings == []

    def test_empty_input(self):
        report = analyze_cannibalization({}, [], "acme.com")

        assert report.has_issues is False
        assert report.summary.total_issues == 0
        assert report.ranking_pages == []

    def test_tracked_locations_default_to_markets(self):
        markets = {DALLAS: make_market(
            make_item("plumber dallas", path="/", position=8, volume=100),
        )}
        assert len(analyze_cannibalization(markets, None, "acme.com").wrong_page_rankings) == 1
        assert analyze_cannibalization(markets, None, "acme.com", tracked_locations=[]).wrong_page_rankings == []


class TestContentTier:
    """Tests for Tier 4 inside the engine."""

    def _pages(self):
        return [
            make_page("/water-heater-repair", h1="Water Heater Repair"),
            make_page("/water-heaters", h1="Water Heater Repair and Replacement"),
            make_page("/drain-cleaning", h1="Drain Cleaning"),
            make_page("/sewer-repair", h1="Sewer Line Repair"),
        ]

    def test_runs_with_pages(self):
        report = analyze_cannibalization({}, self._pages(), "acme.com")
        assert len(report.content_overlaps) == 1
        assert report.summary.total_issues == 1

    def test_disabled(self):
        report = CannibalizationEngine(include_content_overlap=False).analyze({}, self._pages(), "acme.com")
        assert report.content_overlaps == []


class TestReportSerialization:
    """Tests for report.to_dict()."""

    def test_fix_text_attached(self, mixed_markets):
        data = analyze_cannibalization(mixed_markets, None, "acme.com").to_dict()

        assert data["domain"] == "acme.com"
        assert data["summary"]["total_issues"] == 4
        assert data["serp_conflicts"][0]["severity"] == "high"
        assert data["serp_conflicts"][0]["specific_fix"].startswith("Google shows both")
        assert data["wrong_page_rankings"][0]["problem"].startswith("A blog post is ranking")
        assert data["exact_conflicts"][0]["specific_fix"].startswith("1. Keep /water-heater-repair")
        assert "specific_fix" not in data["ngram_overlaps"][0]

    def test_without_fixes(self, mixed_markets):
        data = analyze_cannibalization(mixed_markets, None, "acme.com").to_dict(include_fixes=False)

        assert "specific_fix" not in data["serp_conflicts"][0]
        assert "problem" not in data["wrong_page_rankings"][0]

    def test_generated_at_is_iso(self, mixed_markets):
        data = analyze_cannibalization(mixed_markets, None, "acme.com").to_dict()
        assert "T" in data["generated_at"]
        assert data["duration_seconds"] >= 0
