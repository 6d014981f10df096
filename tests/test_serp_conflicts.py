"""
Tests for Tier 1: SERP-Verified Cannibalization
"""

from siteaudit.detection import detect_cannibalization_conflicts
from siteaudit.models import KeywordIntent, Severity, UrlType

from conftest import DALLAS, DOMAIN, make_item, make_market


class TestConflictDetection:
    """Conflicts from keywords with 2+ domain URLs in one SERP."""

    def test_dallas_scenario(self, dallas_markets):
        conflicts = detect_cannibalization_conflicts(dallas_markets, DOMAIN)

        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.keyword == "emergency plumber dallas"
        assert conflict.market == DALLAS
        assert conflict.primary.page_type == UrlType.HOMEPAGE
        assert conflict.primary.position == 2
        assert len(conflict.competitors) == 1
        assert conflict.competitors[0].page_type == UrlType.SERVICE
        assert conflict.wrong_page_winning is True
        assert conflict.severity == Severity.CRITICAL
        assert conflict.conflict_type == "Homepage Authority Hogging"

    def test_homepage_over_service_commercial(self):
        markets = {DALLAS: make_market(
            make_item("sump pump", volume=40, matches=[("/", 3), ("/sump-pump-installation", 7)]),
        )}
        conflict = detect_cannibalization_conflicts(markets, DOMAIN)[0]

        assert conflict.intent == KeywordIntent.COMMERCIAL
        assert conflict.wrong_page_winning is True
        assert conflict.severity in (Severity.CRITICAL, Severity.HIGH)

    def test_matches_sorted_by_position(self):
        markets = {DALLAS: make_market(
            make_item("drain cleaning", volume=100, matches=[
                ("/services/drain-cleaning", 9),
                ("/blog/drain-tips", 4),
                ("/drain-cleaning-dallas-tx", 15),
            ]),
        )}
        conflict = detect_cannibalization_conflicts(markets, DOMAIN)[0]

        assert conflict.primary.path == "/blog/drain-tips"
        assert [c.position for c in conflict.competitors] == [9, 15]
        assert conflict.competitor_type == UrlType.SERVICE
        assert conflict.position_gap == 11

    def test_tracked_location_makes_local_intent(self, dallas_markets):
        conflict = detect_cannibalization_conflicts(dallas_markets, DOMAIN, [DALLAS])[0]
        assert conflict.intent == KeywordIntent.LOCAL_COMMERCIAL


class TestSkipping:
    """Items that are not SERP-verified conflicts."""

    def test_single_match_skipped(self):
        markets = {DALLAS: make_market(make_item("drain cleaning", volume=100, matches=[("/drain-cleaning", 3)]))}
        assert detect_cannibalization_conflicts(markets, DOMAIN) == []

    def test_not_flagged_skipped(self):
        item = make_item("drain cleaning", volume=100, matches=[("/", 3), ("/drain-cleaning", 5)])
        item.is_cannibalized = False
        assert detect_cannibalization_conflicts({DALLAS: make_market(item)}, DOMAIN) == []

    def test_empty_inputs(self):
        assert detect_cannibalization_conflicts({}, DOMAIN) == []
        assert detect_cannibalization_conflicts(None, DOMAIN) == []


class TestOrdering:
    """Severity first, then volume."""

    def test_sorted_by_severity_then_volume(self):
        markets = {DALLAS: make_market(
            make_item("pipe leak", volume=20, matches=[("/leak-detection", 30), ("/pipe-repair", 40)]),
            make_item("water softener", volume=150, matches=[("/water-softeners", 12), ("/softener-install", 14)]),
            make_item("sewer line", volume=600, matches=[("/sewer-line-repair", 15), ("/sewer-camera", 18)]),
            make_item("toilet repair", volume=120, matches=[("/toilet-repair", 13), ("/toilets", 19)]),
        )}
        conflicts = detect_cannibalization_conflicts(markets, DOMAIN)

        assert [c.keyword for c in conflicts] == ["sewer line", "water softener", "toilet repair", "pipe leak"]
        assert [c.severity for c in conflicts] == [
            Severity.CRITICAL, Severity.HIGH, Severity.HIGH, Severity.MEDIUM,
        ]

    def test_idempotent(self, mixed_markets):
        first = [c.to_dict() for c in detect_cannibalization_conflicts(mixed_markets, DOMAIN)]
        second = [c.to_dict() for c in detect_cannibalization_conflicts(mixed_markets, DOMAIN)]
        assert first == second
