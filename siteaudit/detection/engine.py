"""
Cannibalization Engine - Runs every detection tier over one site.

Tiers:
1. SERP-verified conflicts (two pages in the same results)
2. Wrong page ranking (page type doesn't match intent)
3. Keyword overlap (shared phrases and identical keywords between pages)
4. Content overlap (headings targeting the same topic)

Plus the ranking page map and the set of keywords more than one page
ranks for.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from siteaudit.models import (
    CannibalizationConflict,
    ContentOverlapGroup,
    CrawledPage,
    ExactKeywordConflict,
    MarketData,
    NgramOverlapConflict,
    RankingPage,
    Severity,
    WrongPageRanking,
)
from siteaudit.utils.urls import normalize_domain

from .content_overlap import detect_content_overlaps
from .fixes import (
    content_overlap_fix,
    exact_conflict_fix,
    problem_statement,
    serp_conflict_fix,
    wrong_page_fix,
)
from .keyword_overlap import detect_exact_keyword_conflicts, detect_ngram_overlaps
from .ranking_pages import build_ranking_page_map, find_competing_keywords
from .serp_conflicts import detect_cannibalization_conflicts
from .wrong_page import detect_wrong_page_rankings

logger = logging.getLogger(__name__)


@dataclass
class ReportSummary:
    """Headline numbers for a cannibalization report."""

    total_issues: int = 0
    urgent_count: int = 0          # Critical SERP conflicts + high wrong-page rankings
    searches_affected: int = 0     # Monthly volume across Tier 1 and Tier 2

    serp_conflicts: int = 0
    wrong_page_rankings: int = 0
    ngram_overlaps: int = 0
    exact_conflicts: int = 0
    content_overlaps: int = 0
    ranking_pages: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_issues": self.total_issues,
            "urgent_count": self.urgent_count,
            "searches_affected": self.searches_affected,
            "serp_conflicts": self.serp_conflicts,
            "wrong_page_rankings": self.wrong_page_rankings,
            "ngram_overlaps": self.ngram_overlaps,
            "exact_conflicts": self.exact_conflicts,
            "content_overlaps": self.content_overlaps,
            "ranking_pages": self.ranking_pages,
        }


@dataclass
class CannibalizationReport:
    """Complete output of one engine run."""

    # Metadata
    domain: str
    generated_at: datetime
    duration_seconds: float
    markets: List[str] = field(default_factory=list)

    # Tier outputs
    serp_conflicts: List[CannibalizationConflict] = field(default_factory=list)
    wrong_page_rankings: List[WrongPageRanking] = field(default_factory=list)
    ngram_overlaps: List[NgramOverlapConflict] = field(default_factory=list)
    exact_conflicts: List[ExactKeywordConflict] = field(default_factory=list)
    content_overlaps: List[ContentOverlapGroup] = field(default_factory=list)

    # Supporting evidence
    ranking_pages: List[RankingPage] = field(default_factory=list)
    competing_keywords: List[str] = field(default_factory=list)

    @property
    def summary(self) -> ReportSummary:
        urgent = (
            sum(1 for c in self.serp_conflicts if c.severity == Severity.CRITICAL)
            + sum(1 for w in self.wrong_page_rankings if w.severity == Severity.HIGH)
        )
        volume = (
            sum(c.volume for c in self.serp_conflicts)
            + sum(w.volume for w in self.wrong_page_rankings)
        )
        total = (
            len(self.serp_conflicts)
            + len(self.wrong_page_rankings)
            + len(self.ngram_overlaps)
            + len(self.exact_conflicts)
            + len(self.content_overlaps)
        )
        return ReportSummary(
            total_issues=total,
            urgent_count=urgent,
            searches_affected=volume,
            serp_conflicts=len(self.serp_conflicts),
            wrong_page_rankings=len(self.wrong_page_rankings),
            ngram_overlaps=len(self.ngram_overlaps),
            exact_conflicts=len(self.exact_conflicts),
            content_overlaps=len(self.content_overlaps),
            ranking_pages=len(self.ranking_pages),
        )

    @property
    def has_issues(self) -> bool:
        return self.summary.total_issues > 0

    def to_dict(self, include_fixes: bool = True) -> Dict[str, Any]:
        """
        Serialize the report.

        Args:
            include_fixes: Attach path-specific fix text (and problem
                statements where they exist) to each issue
        """
        def with_text(record, **text) -> Dict[str, Any]:
            data = record.to_dict()
            if include_fixes:
                data.update(text)
            return data

        return {
            "domain": self.domain,
            "generated_at": self.generated_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "markets": list(self.markets),
            "summary": self.summary.to_dict(),
            "serp_conflicts": [
                with_text(c, specific_fix=serp_conflict_fix(c)) for c in self.serp_conflicts
            ],
            "wrong_page_rankings": [
                with_text(w, specific_fix=wrong_page_fix(w), problem=problem_statement(w))
                for w in self.wrong_page_rankings
            ],
            "ngram_overlaps": [o.to_dict() for o in self.ngram_overlaps],
            "exact_conflicts": [
                with_text(e, specific_fix=exact_conflict_fix(e)) for e in self.exact_conflicts
            ],
            "content_overlaps": [
                with_text(g, specific_fix=content_overlap_fix(g), problem=problem_statement(g))
                for g in self.content_overlaps
            ],
            "ranking_pages": [p.to_dict() for p in self.ranking_pages],
            "competing_keywords": list(self.competing_keywords),
        }


class CannibalizationEngine:
    """
    Runs all detection tiers for one domain.

    Tier 1 runs first; its keywords are excluded from Tier 2 so the same
    problem is never reported twice. The remaining tiers are independent.
    """

    def __init__(self, include_content_overlap: bool = True):
        """
        Args:
            include_content_overlap: Run Tier 4 when crawled pages are supplied
        """
        self.include_content_overlap = include_content_overlap

    def analyze(
        self,
        markets: Optional[Dict[str, MarketData]],
        pages: Optional[List[CrawledPage]] = None,
        domain: str = "",
        tracked_locations: Optional[Sequence[str]] = None,
    ) -> CannibalizationReport:
        """
        Run the full analysis.

        Args:
            markets: Market location -> MarketData (may be empty)
            pages: Crawled pages for Tier 4 (may be empty)
            domain: Site domain
            tracked_locations: "City,State,Country" strings; defaults to
                the market keys

        Returns:
            CannibalizationReport
        """
        start_time = datetime.now(timezone.utc)
        markets = markets or {}
        pages = pages or []
        domain = normalize_domain(domain)
        locations = list(tracked_locations) if tracked_locations is not None else list(markets.keys())

        logger.info(
            f"Starting cannibalization analysis for {domain or 'unknown domain'}: "
            f"{len(markets)} markets, {len(pages)} crawled pages"
        )

        # ================================================================
        # TIER 1: SERP-Verified
        # ================================================================
        serp_conflicts = detect_cannibalization_conflicts(markets, domain, locations)
        serp_keywords = {c.keyword.lower() for c in serp_conflicts}

        # ================================================================
        # TIER 2: Wrong Page Ranking
        # ================================================================
        wrong_pages = detect_wrong_page_rankings(markets, domain, locations, serp_keywords)

        # ================================================================
        # TIER 3: Keyword Overlap
        # ================================================================
        ngram_overlaps = detect_ngram_overlaps(markets)
        exact_conflicts = detect_exact_keyword_conflicts(markets)

        # ================================================================
        # TIER 4: Content Overlap
        # ================================================================
        if self.include_content_overlap and pages:
            content_overlaps = detect_content_overlaps(pages, domain, locations)
        else:
            logger.debug("Tier 4: skipped (no crawled pages or disabled)")
            content_overlaps = []

        ranking_pages = build_ranking_page_map(markets)
        competing = sorted(find_competing_keywords(ranking_pages))

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()

        report = CannibalizationReport(
            domain=domain,
            generated_at=start_time,
            duration_seconds=duration,
            markets=list(markets.keys()),
            serp_conflicts=serp_conflicts,
            wrong_page_rankings=wrong_pages,
            ngram_overlaps=ngram_overlaps,
            exact_conflicts=exact_conflicts,
            content_overlaps=content_overlaps,
            ranking_pages=ranking_pages,
            competing_keywords=competing,
        )

        summary = report.summary
        logger.info(
            f"Analysis complete in {duration:.2f}s: {summary.total_issues} issues "
            f"({summary.urgent_count} urgent, {summary.searches_affected:,} searches affected)"
        )
        return report


def analyze_cannibalization(
    markets: Optional[Dict[str, MarketData]],
    pages: Optional[List[CrawledPage]] = None,
    domain: str = "",
    tracked_locations: Optional[Sequence[str]] = None,
) -> CannibalizationReport:
    """
    Convenience function to run the full analysis.

    Example:
        report = analyze_cannibalization(markets, pages, "acme.com")
        print(report.summary.urgent_count)
    """
    return CannibalizationEngine().analyze(markets, pages, domain, tracked_locations)
