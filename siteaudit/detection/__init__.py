"""
Detection Package

Four cannibalization tiers, the ranking page map, remediation text and
the engine that runs them together.

Usage:
    from siteaudit.detection import analyze_cannibalization

    report = analyze_cannibalization(markets, pages, "acme.com")
    for conflict in report.serp_conflicts:
        print(conflict.keyword, conflict.severity.value)
"""

from .serp_conflicts import detect_cannibalization_conflicts
from .wrong_page import detect_wrong_page_rankings
from .keyword_overlap import detect_exact_keyword_conflicts, detect_ngram_overlaps, keyword_ngrams
from .content_overlap import detect_content_overlaps, extract_target_tokens, target_bigrams
from .ranking_pages import build_ranking_page_map, find_competing_keywords
from .fixes import (
    content_overlap_fix,
    exact_conflict_fix,
    problem_statement,
    serp_conflict_fix,
    wrong_page_fix,
)
from .engine import (
    CannibalizationEngine,
    CannibalizationReport,
    ReportSummary,
    analyze_cannibalization,
)

__all__ = [
    # Tiers
    "detect_cannibalization_conflicts",
    "detect_wrong_page_rankings",
    "detect_ngram_overlaps",
    "detect_exact_keyword_conflicts",
    "detect_content_overlaps",
    "keyword_ngrams",
    "extract_target_tokens",
    "target_bigrams",

    # Page map
    "build_ranking_page_map",
    "find_competing_keywords",

    # Fix text
    "serp_conflict_fix",
    "wrong_page_fix",
    "exact_conflict_fix",
    "content_overlap_fix",
    "problem_statement",

    # Engine
    "CannibalizationEngine",
    "CannibalizationReport",
    "ReportSummary",
    "analyze_cannibalization",
]
