"""
Tier 1: SERP-Verified Cannibalization

Processes keyword items where two or more domain URLs appear in the
same search results into CannibalizationConflict records using the
URL, intent and conflict classifiers.
"""

import logging
from typing import Dict, List, Optional, Sequence

from siteaudit.classifiers import (
    classify_conflict_type,
    classify_keyword_intent,
    classify_url_type,
    compute_severity,
    is_wrong_page_winning,
)
from siteaudit.models import (
    SEVERITY_ORDER,
    CannibalizationConflict,
    ConflictPage,
    MarketData,
    SerpMatch,
)

logger = logging.getLogger(__name__)


def _conflict_page(match: SerpMatch) -> ConflictPage:
    return ConflictPage(
        url=match.url,
        path=match.path,
        position=match.position,
        title=match.title,
        page_type=classify_url_type(match.url),
    )


def detect_cannibalization_conflicts(
    markets: Dict[str, MarketData],
    domain: str,
    tracked_locations: Optional[Sequence[str]] = None,
) -> List[CannibalizationConflict]:
    """
    Build CannibalizationConflict records from all markets' keyword data.

    For every item flagged ``is_cannibalized`` with 2+ SERP matches:
    1. Sort matches by position; the best is the primary page
    2. Classify primary and top competitor page types
    3. Classify keyword intent
    4. Classify the conflict (description + actionable fix)
    5. Assign severity

    Args:
        markets: Market location -> MarketData
        domain: Site domain, used for branded-intent detection
        tracked_locations: "City,State,Country" strings for local intent

    Returns:
        Conflicts sorted critical -> high -> medium, then by search
        volume descending within each severity
    """
    conflicts: List[CannibalizationConflict] = []

    for market_location, market_data in (markets or {}).items():
        for item in market_data.items:
            if not item.is_cannibalized:
                continue
            if len(item.serp_matches) < 2:
                continue

            ordered = sorted(item.serp_matches, key=lambda m: m.position)
            primary = _conflict_page(ordered[0])
            competitors = [_conflict_page(m) for m in ordered[1:]]

            # The best-ranked competitor is the one most likely stealing clicks
            competitor_type = competitors[0].page_type
            intent = classify_keyword_intent(item.keyword, domain, tracked_locations)
            classification = classify_conflict_type(primary.page_type, competitor_type, intent)
            wrong_page_winning = is_wrong_page_winning(primary.page_type, competitor_type, intent)

            volume = item.search_volume or 0
            severity = compute_severity(volume, primary.position, wrong_page_winning)

            conflicts.append(CannibalizationConflict(
                keyword=item.keyword,
                volume=volume,
                cpc=item.cpc or 0.0,
                market=market_location,
                primary=primary,
                competitors=competitors,
                position_gap=competitors[-1].position - primary.position,
                all_matches=list(item.serp_matches),
                severity=severity,
                intent=intent,
                conflict_type=classification.type,
                conflict_icon=classification.icon,
                conflict_description=classification.description,
                conflict_fix=classification.fix,
                primary_type=primary.page_type,
                competitor_type=competitor_type,
                wrong_page_winning=wrong_page_winning,
            ))

    conflicts.sort(key=lambda c: (SEVERITY_ORDER[c.severity], -c.volume))

    logger.debug(f"Tier 1: {len(conflicts)} SERP-verified conflicts")
    return conflicts
