"""
Tests for Conflict Classification, Wrong-Page Detection and Severity
"""

import pytest

from siteaudit.classifiers import (
    classify_conflict_type,
    classify_content_overlap,
    compute_severity,
    is_wrong_page_winning,
)
from siteaudit.models import KeywordIntent, Severity, UrlType


class TestConflictType:
    """Named conflicts for page-type pairs."""

    def test_homepage_service(self):
        result = classify_conflict_type(UrlType.HOMEPAGE, UrlType.SERVICE, KeywordIntent.COMMERCIAL)
        assert result.type == "Homepage Authority Hogging"
        assert result.fix

    def test_pair_is_unordered(self):
        a = classify_conflict_type(UrlType.BLOG, UrlType.SERVICE, KeywordIntent.COMMERCIAL)
        b = classify_conflict_type(UrlType.SERVICE, UrlType.BLOG, KeywordIntent.COMMERCIAL)
        assert a == b

    def test_same_type_pair(self):
        result = classify_conflict_type(UrlType.LOCATION, UrlType.LOCATION, KeywordIntent.LOCAL_COMMERCIAL)
        assert result.type == "City Pages Cannibalizing Each Other"

    def test_unlisted_pair_is_generic(self):
        result = classify_conflict_type(UrlType.FAQ, UrlType.GALLERY, KeywordIntent.COMMERCIAL)
        assert result.type == "Page Conflict"
        assert "faq" in result.description
        assert "gallery" in result.description


class TestWrongPageWinning:
    """Lower-converting page outranking a better one."""

    @pytest.mark.parametrize("primary,competitor", [
        (UrlType.HOMEPAGE, UrlType.SERVICE),
        (UrlType.HOMEPAGE, UrlType.LOCATION),
        (UrlType.BLOG, UrlType.SERVICE),
        (UrlType.BLOG, UrlType.LOCATION),
        (UrlType.BLOG, UrlType.HOMEPAGE),
    ])
    def test_wrong_page_under_commercial_intent(self, primary, competitor):
        assert is_wrong_page_winning(primary, competitor, KeywordIntent.COMMERCIAL)
        assert is_wrong_page_winning(primary, competitor, KeywordIntent.LOCAL_COMMERCIAL)

    def test_informational_never_wrong(self):
        assert not is_wrong_page_winning(UrlType.BLOG, UrlType.SERVICE, KeywordIntent.INFORMATIONAL)

    def test_right_page_winning(self):
        assert not is_wrong_page_winning(UrlType.SERVICE, UrlType.HOMEPAGE, KeywordIntent.COMMERCIAL)


class TestSeverity:
    """Severity thresholds."""

    def test_wrong_page_high_volume_is_critical(self):
        assert compute_severity(200, 9, True) == Severity.CRITICAL

    def test_wrong_page_top_five_is_critical(self):
        assert compute_severity(10, 5, True) == Severity.CRITICAL

    def test_very_high_volume_is_critical(self):
        assert compute_severity(500, 30, False) == Severity.CRITICAL

    def test_volume_100_is_high(self):
        assert compute_severity(100, 30, False) == Severity.HIGH

    def test_top_ten_is_high(self):
        assert compute_severity(10, 10, False) == Severity.HIGH

    def test_wrong_page_low_volume_deep_is_high(self):
        assert compute_severity(50, 8, True) == Severity.HIGH

    def test_medium(self):
        assert compute_severity(99, 11, False) == Severity.MEDIUM


class TestContentOverlapLabel:
    """Labels for content-overlap groups."""

    def test_service_and_location(self):
        key, _, _ = classify_content_overlap([UrlType.SERVICE, UrlType.LOCATION, UrlType.LOCATION])
        assert key == "service-location"

    def test_locations_only(self):
        key, conflict_type, _ = classify_content_overlap([UrlType.LOCATION, UrlType.LOCATION])
        assert key == "location-location"
        assert conflict_type == "Templated City Pages"

    def test_blog_involved(self):
        key, _, _ = classify_content_overlap([UrlType.BLOG, UrlType.SERVICE])
        assert key == "blog-involved"

    def test_services_only(self):
        key, _, _ = classify_content_overlap([UrlType.SERVICE, UrlType.SERVICE])
        assert key == "service-service"

    def test_generic(self):
        key, _, fix = classify_content_overlap([UrlType.HOMEPAGE, UrlType.SERVICE])
        assert key == "generic"
        assert fix
