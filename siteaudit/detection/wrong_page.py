"""
Tier 2: Wrong Page Ranking

Flags keywords where a single page ranks but its page type does not
match the keyword's intent, e.g. a blog post ranking for a
ready-to-hire query. No competing URL is required.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from siteaudit.classifiers import classify_keyword_intent, classify_url_type
from siteaudit.classifiers.helpers import COMMERCIAL_INTENTS
from siteaudit.models import (
    SEVERITY_ORDER,
    KeywordIntent,
    MarketData,
    Severity,
    UrlType,
    WrongPageRanking,
)
from siteaudit.utils.urls import relative_path

logger = logging.getLogger(__name__)


MAX_POSITION = 20
MIN_VOLUME = 10
HIGH_SEVERITY_MAX_POSITION = 10

# Homepage ranking below this for a local query: a city page would likely do better.
# Heuristic cutoff, not a measured threshold.
HOMEPAGE_LOCAL_POSITION_CUTOFF = 5


def _find_mismatch(
    page_type: UrlType,
    intent: KeywordIntent,
    position: int,
) -> Optional[Tuple[UrlType, Severity, str]]:
    """Return (ideal page type, severity, reason) or None when the page fits the intent."""
    if intent in COMMERCIAL_INTENTS:
        if page_type == UrlType.BLOG:
            severity = Severity.HIGH if position <= HIGH_SEVERITY_MAX_POSITION else Severity.MEDIUM
            return (
                UrlType.SERVICE,
                severity,
                "A blog post is ranking for a ready-to-hire search. Searchers want a business "
                "to call, not an article to read.",
            )
        if page_type == UrlType.ABOUT:
            return (
                UrlType.SERVICE,
                Severity.MEDIUM,
                "The about page is ranking for a commercial search. It describes the company, "
                "not the service the searcher wants to buy.",
            )
        if page_type == UrlType.FAQ:
            return (
                UrlType.SERVICE,
                Severity.MEDIUM,
                "An FAQ page is ranking for a commercial search. It answers questions but "
                "doesn't sell the service.",
            )
        if page_type == UrlType.GALLERY:
            return (
                UrlType.SERVICE,
                Severity.MEDIUM,
                "A gallery page is ranking for a commercial search. Photos alone rarely "
                "convert visitors ready to hire.",
            )

    if (
        intent == KeywordIntent.LOCAL_COMMERCIAL
        and page_type == UrlType.HOMEPAGE
        and position > HOMEPAGE_LOCAL_POSITION_CUTOFF
    ):
        return (
            UrlType.LOCATION,
            Severity.MEDIUM,
            f"The homepage ranks #{position} for a local search. A dedicated city page "
            f"would likely outrank and outconvert it.",
        )

    return None


def detect_wrong_page_rankings(
    markets: Dict[str, MarketData],
    domain: str,
    tracked_locations: Optional[Sequence[str]] = None,
    skip_keywords: Optional[Iterable[str]] = None,
) -> List[WrongPageRanking]:
    """
    Detect keywords ranking with a page type that mismatches intent.

    Only items ranking in positions 1-20 with volume >= 10 are
    considered. Keywords already reported as SERP-verified conflicts
    are passed in ``skip_keywords`` and excluded (case-insensitive).

    Args:
        markets: Market location -> MarketData
        domain: Site domain
        tracked_locations: "City,State,Country" strings
        skip_keywords: Keywords already flagged by Tier 1

    Returns:
        Mismatches sorted by severity, then volume descending
    """
    skip: Set[str] = {kw.lower() for kw in (skip_keywords or [])}
    seen: Set[Tuple[str, str]] = set()
    results: List[WrongPageRanking] = []

    for market_location, market_data in (markets or {}).items():
        for item in market_data.items:
            keyword = item.keyword or ""
            if not keyword or keyword.lower() in skip:
                continue

            position = item.position or 0
            volume = item.search_volume or 0
            if position < 1 or position > MAX_POSITION or volume < MIN_VOLUME:
                continue
            if not item.url:
                continue

            dedupe_key = (keyword.lower(), item.url)
            if dedupe_key in seen:
                continue
            seen.add(dedupe_key)

            page_type = classify_url_type(item.url)
            intent = classify_keyword_intent(keyword, domain, tracked_locations)
            mismatch = _find_mismatch(page_type, intent, position)
            if mismatch is None:
                continue

            ideal_page_type, severity, reason = mismatch
            results.append(WrongPageRanking(
                keyword=keyword,
                volume=volume,
                position=position,
                url=item.url,
                path=item.relative_url or relative_path(item.url),
                market=market_location,
                page_type=page_type,
                intent=intent,
                ideal_page_type=ideal_page_type,
                reason=reason,
                severity=severity,
            ))

    results.sort(key=lambda r: (SEVERITY_ORDER[r.severity], -r.volume))

    logger.debug(f"Tier 2: {len(results)} wrong-page rankings")
    return results
