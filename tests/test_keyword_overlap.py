"""
Tests for Tier 3: Keyword Overlap Between Ranking Pages
"""

from siteaudit.detection import (
    detect_exact_keyword_conflicts,
    detect_ngram_overlaps,
    keyword_ngrams,
)
from siteaudit.models import OverlapRisk, UrlType

from conftest import DALLAS, HOUSTON, make_item, make_market


def _unique_keywords(path, prefix, count, volume=5):
    """Three-word keywords whose n-grams appear on no other page."""
    return [
        make_item(f"{prefix}{i} variant{prefix}{i} option{prefix}{i}", path=path, position=20, volume=volume)
        for i in range(count)
    ]


def _unique_pairs(path, prefix, count):
    """Two-word keywords, one n-gram each, found on no other page."""
    return [
        make_item(f"{prefix}{i} single{prefix}{i}", path=path, position=30, volume=5)
        for i in range(count)
    ]


# =============================================================================
# N-GRAM EXTRACTION
# =============================================================================


class TestKeywordNgrams:
    """Tests for 2-3 word phrase extraction."""

    def test_short_words_dropped(self):
        assert keyword_ngrams("AC repair in Dallas TX") == {"repair dallas"}

    def test_bigrams_and_trigrams(self):
        assert keyword_ngrams("water heater repair") == {
            "water heater", "heater repair", "water heater repair",
        }

    def test_punctuation_removed(self):
        assert keyword_ngrams("plumber's 24/7 service!") == {"plumbers 247", "247 service", "plumbers 247 service"}

    def test_single_word(self):
        assert keyword_ngrams("plumbing") == set()


# =============================================================================
# N-GRAM OVERLAP
# =============================================================================


class TestNgramOverlap:
    """Tests for page pairs sharing keyword phrases."""

    def test_two_shared_small_profiles_is_high(self):
        markets = {DALLAS: make_market(
            make_item("water heater", path="/water-heater-repair", position=3, volume=100),
            make_item("drain cleaning", path="/water-heater-repair", position=9, volume=50),
            make_item("water heater cost", path="/water-heaters", position=6, volume=60),
            make_item("drain cleaning", path="/water-heaters", position=11, volume=40),
        )}
        conflicts = detect_ngram_overlaps(markets)

        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.page_a.path == "/water-heater-repair"
        assert conflict.page_b.path == "/water-heaters"
        assert conflict.shared_ngrams == ["drain cleaning", "water heater"]
        assert conflict.shared_count == 2
        assert conflict.overlap_pct == 100.0
        assert conflict.risk == OverlapRisk.HIGH
        assert conflict.shared_volume == 250
        assert conflict.shared_keywords == ["drain cleaning", "water heater", "water heater cost"]

    def test_one_shared_phrase_not_reported(self):
        markets = {DALLAS: make_market(
            make_item("water heater", path="/water-heater-repair", position=3, volume=100),
            make_item("water heater cost", path="/water-heaters", position=6, volume=60),
        )}
        assert detect_ngram_overlaps(markets) == []

    def test_two_shared_in_large_profiles_not_reported(self):
        """2 of 17 phrases is under 15% and below the strong-overlap count."""
        markets = {DALLAS: make_market(
            make_item("water heater", path="/water-heater-repair", position=3, volume=100),
            make_item("drain cleaning", path="/water-heater-repair", position=9, volume=50),
            *_unique_keywords("/water-heater-repair", "alpha", 5),
            make_item("water heater", path="/water-heaters", position=6, volume=100),
            make_item("drain cleaning", path="/water-heaters", position=11, volume=50),
            *_unique_keywords("/water-heaters", "delta", 5),
        )}
        assert detect_ngram_overlaps(markets) == []

    def test_three_of_twenty_at_threshold_reported(self):
        """Low-volume phrases fall outside the top 20, leaving exactly 15%."""
        markets = {DALLAS: make_market(
            make_item("sewer line", path="/sewer-repair", position=4, volume=100),
            make_item("toilet repair", path="/sewer-repair", position=5, volume=100),
            make_item("sump pump", path="/sewer-repair", position=6, volume=100),
            *_unique_keywords("/sewer-repair", "alpha", 5),
            *_unique_pairs("/sewer-repair", "bravo", 2),
            *_unique_keywords("/sewer-repair", "charlie", 2, volume=1),
            make_item("sewer line", path="/sewer-line-service", position=7, volume=100),
            make_item("toilet repair", path="/sewer-line-service", position=8, volume=100),
            make_item("sump pump", path="/sewer-line-service", position=9, volume=100),
            *_unique_keywords("/sewer-line-service", "delta", 5),
            *_unique_pairs("/sewer-line-service", "echo", 2),
            *_unique_keywords("/sewer-line-service", "foxtrot", 2, volume=1),
        )}
        conflicts = detect_ngram_overlaps(markets)

        assert len(conflicts) == 1
        assert conflicts[0].shared_ngrams == ["sewer line", "sump pump", "toilet repair"]
        assert conflicts[0].overlap_pct == 15.0
        assert conflicts[0].risk == OverlapRisk.MEDIUM

    def test_two_of_fourteen_below_threshold(self):
        markets = {DALLAS: make_market(
            make_item("water heater", path="/water-heater-repair", position=3, volume=100),
            make_item("drain cleaning", path="/water-heater-repair", position=9, volume=50),
            *_unique_keywords("/water-heater-repair", "alpha", 4),
            make_item("water heater", path="/water-heaters", position=6, volume=100),
            make_item("drain cleaning", path="/water-heaters", position=11, volume=50),
            *_unique_keywords("/water-heaters", "delta", 4),
        )}
        assert detect_ngram_overlaps(markets) == []

    def test_two_of_thirteen_above_threshold(self):
        markets = {DALLAS: make_market(
            make_item("water heater", path="/water-heater-repair", position=3, volume=100),
            make_item("drain cleaning", path="/water-heater-repair", position=9, volume=50),
            *_unique_keywords("/water-heater-repair", "alpha", 3),
            *_unique_pairs("/water-heater-repair", "bravo", 2),
            make_item("water heater", path="/water-heaters", position=6, volume=100),
            make_item("drain cleaning", path="/water-heaters", position=11, volume=50),
            *_unique_keywords("/water-heaters", "delta", 3),
            *_unique_pairs("/water-heaters", "echo", 2),
        )}
        conflicts = detect_ngram_overlaps(markets)

        assert len(conflicts) == 1
        assert conflicts[0].overlap_pct == 15.4
        assert conflicts[0].risk == OverlapRisk.MEDIUM

    def test_three_shared_is_medium(self):
        markets = {DALLAS: make_market(
            make_item("sewer line", path="/sewer-repair", position=4, volume=90),
            make_item("toilet repair", path="/sewer-repair", position=5, volume=80),
            make_item("sump pump", path="/sewer-repair", position=6, volume=70),
            *_unique_keywords("/sewer-repair", "alpha", 3),
            make_item("sewer line", path="/sewer-line-service", position=7, volume=90),
            make_item("toilet repair", path="/sewer-line-service", position=8, volume=80),
            make_item("sump pump", path="/sewer-line-service", position=9, volume=70),
            *_unique_keywords("/sewer-line-service", "delta", 3),
        )}
        conflicts = detect_ngram_overlaps(markets)

        assert len(conflicts) == 1
        assert conflicts[0].overlap_pct == 25.0
        assert conflicts[0].risk == OverlapRisk.MEDIUM

    def test_high_risk_sorted_first(self):
        markets = {DALLAS: make_market(
            make_item("sewer line", path="/sewer-repair", position=4, volume=900),
            make_item("toilet repair", path="/sewer-repair", position=5, volume=800),
            make_item("sump pump", path="/sewer-repair", position=6, volume=700),
            *_unique_keywords("/sewer-repair", "alpha", 3),
            make_item("sewer line", path="/sewer-line-service", position=7, volume=900),
            make_item("toilet repair", path="/sewer-line-service", position=8, volume=800),
            make_item("sump pump", path="/sewer-line-service", position=9, volume=700),
            *_unique_keywords("/sewer-line-service", "delta", 3),
            make_item("water heater", path="/water-heater-repair", position=3, volume=100),
            make_item("drain cleaning", path="/water-heater-repair", position=9, volume=50),
            make_item("water heater cost", path="/water-heaters", position=6, volume=60),
            make_item("drain cleaning", path="/water-heaters", position=11, volume=40),
        )}
        conflicts = detect_ngram_overlaps(markets)

        assert [c.risk for c in conflicts] == [OverlapRisk.HIGH, OverlapRisk.MEDIUM]
        assert conflicts[0].page_a.path == "/water-heater-repair"

    def test_utility_pages_not_profiled(self):
        markets = {DALLAS: make_market(
            make_item("water heater", path="/water-heater-repair", position=3, volume=100),
            make_item("drain cleaning", path="/water-heater-repair", position=9, volume=50),
            make_item("water heater", path="/contact", position=6, volume=100),
            make_item("drain cleaning", path="/contact", position=11, volume=50),
        )}
        assert detect_ngram_overlaps(markets) == []

    def test_positions_beyond_100_ignored(self):
        markets = {DALLAS: make_market(
            make_item("water heater", path="/water-heater-repair", position=3, volume=100),
            make_item("drain cleaning", path="/water-heater-repair", position=9, volume=50),
            make_item("water heater", path="/water-heaters", position=101, volume=100),
            make_item("drain cleaning", path="/water-heaters", position=120, volume=50),
        )}
        assert detect_ngram_overlaps(markets) == []


# =============================================================================
# EXACT KEYWORD CONFLICTS
# =============================================================================


class TestExactKeywordConflicts:
    """Tests for page pairs ranking for the identical keyword."""

    def test_serp_match_counts_as_ranking(self, mixed_markets):
        conflicts = detect_exact_keyword_conflicts(mixed_markets)

        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.page_a.path == "/water-heater-repair"
        assert conflict.page_b.path == "/water-heater-repair-dallas-tx"
        assert conflict.page_b.url_type == UrlType.LOCATION
        assert conflict.page_b.keyword_count == 2
        assert conflict.total_shared_volume == 400

        shared = conflict.shared_keywords[0]
        assert shared.keyword == "water heater repair"
        assert shared.position_a == 3
        assert shared.position_b == 8
        assert shared.market == DALLAS

    def test_keywords_matched_case_insensitively(self):
        markets = {DALLAS: make_market(
            make_item("Drain Cleaning", path="/drain-cleaning", position=4, volume=80),
            make_item("drain cleaning", path="/services/drain-cleaning", position=7, volume=120),
        )}
        conflicts = detect_exact_keyword_conflicts(markets)

        assert len(conflicts) == 1
        shared = conflicts[0].shared_keywords[0]
        assert shared.keyword == "Drain Cleaning"
        assert shared.volume == 120
        assert (shared.position_a, shared.position_b) == (4, 7)
        assert shared.market == DALLAS

    def test_city_pages_in_their_own_markets_not_paired(self):
        markets = {
            DALLAS: make_market(
                make_item("drain cleaning", path="/drain-cleaning-dallas-tx", position=2, volume=150),
            ),
            HOUSTON: make_market(
                make_item("drain cleaning", path="/drain-cleaning-houston-tx", position=3, volume=150),
            ),
        }
        assert detect_exact_keyword_conflicts(markets) == []

    def test_same_pair_in_two_markets_listed_per_market(self):
        markets = {
            DALLAS: make_market(make_item(
                "drain cleaning", volume=150, matches=[("/drain-cleaning", 2), ("/services/drain-cleaning", 6)],
            )),
            HOUSTON: make_market(make_item(
                "drain cleaning", volume=90, matches=[("/services/drain-cleaning", 4), ("/drain-cleaning", 9)],
            )),
        }
        conflicts = detect_exact_keyword_conflicts(markets)

        assert len(conflicts) == 1
        assert [(k.market, k.position_a, k.position_b) for k in conflicts[0].shared_keywords] == [
            (DALLAS, 2, 6), (HOUSTON, 9, 4),
        ]
        assert conflicts[0].total_shared_volume == 240

    def test_sorted_by_shared_count(self):
        markets = {DALLAS: make_market(
            make_item("sewer repair", path="/sewer-repair", position=2, volume=900),
            make_item("sewer repair", path="/sewer-line", position=5, volume=900),
            make_item("drain cleaning", path="/drain-cleaning", position=3, volume=50),
            make_item("drain cleaning", path="/drain-services", position=4, volume=50),
            make_item("drain repair", path="/drain-cleaning", position=6, volume=30),
            make_item("drain repair", path="/drain-services", position=8, volume=30),
        )}
        conflicts = detect_exact_keyword_conflicts(markets)

        assert [len(c.shared_keywords) for c in conflicts] == [2, 1]
        assert [k.keyword for k in conflicts[0].shared_keywords] == ["drain cleaning", "drain repair"]

    def test_distinct_keywords_no_conflict(self):
        markets = {DALLAS: make_market(
            make_item("drain cleaning", path="/drain-cleaning", position=3, volume=50),
            make_item("sewer repair", path="/sewer-repair", position=2, volume=900),
        )}
        assert detect_exact_keyword_conflicts(markets) == []
