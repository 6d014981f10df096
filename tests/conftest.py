"""
Pytest Configuration and Shared Fixtures

Provides builders for keyword items, markets and crawled pages used
across the test modules.
"""

import pytest
from typing import Dict, List, Optional, Tuple

from siteaudit.models import CrawledPage, KeywordRankingItem, MarketData, SerpMatch
from siteaudit.utils.urls import relative_path


DOMAIN = "acme.com"
BASE_URL = "https://acme.com"
DALLAS = "Dallas,Texas,United States"
HOUSTON = "Houston,Texas,United States"


def url(path: str) -> str:
    """Absolute URL on the test domain."""
    return BASE_URL + path


def make_item(
    keyword: str,
    path: str = "",
    position: int = 0,
    volume: int = 0,
    matches: Optional[List[Tuple[str, int]]] = None,
    etv: Optional[float] = None,
    cpc: float = 0.0,
) -> KeywordRankingItem:
    """
    Build a KeywordRankingItem.

    ``matches`` lists (path, position) SERP matches; when given, the best
    match becomes the ranking URL and 2+ matches flag cannibalization.
    """
    serp_matches = [
        SerpMatch(url=url(p), path=p, position=pos, title=f"Title {p}")
        for p, pos in (matches or [])
    ]
    if serp_matches and not path:
        best = min(serp_matches, key=lambda m: m.position)
        path, position = best.path, best.position

    full_url = url(path) if path else ""
    return KeywordRankingItem(
        keyword=keyword,
        search_volume=volume,
        cpc=cpc,
        position=position,
        url=full_url,
        relative_url=relative_path(full_url) if full_url else "",
        etv=etv if etv is not None else (round(100 / position) if position else 0),
        serp_matches=serp_matches,
        is_cannibalized=len(serp_matches) > 1,
    )


def make_market(*items: KeywordRankingItem) -> MarketData:
    return MarketData(items=list(items), total_count=len(items))


def make_page(path: str, h1: str = "", title: str = "", status_code: int = 200) -> CrawledPage:
    return CrawledPage(
        url=url(path),
        status_code=status_code,
        title=title,
        h1=[h1] if h1 else [],
    )


# ============================================================================
# Market Fixtures
# ============================================================================

@pytest.fixture
def dallas_markets() -> Dict[str, MarketData]:
    """One cannibalized keyword: homepage at #2, service page at #6."""
    return {
        DALLAS: make_market(
            make_item(
                "emergency plumber dallas",
                volume=300,
                matches=[("/", 2), ("/emergency-plumbing", 6)],
            ),
        ),
    }


@pytest.fixture
def mixed_markets() -> Dict[str, MarketData]:
    """Two markets with a SERP conflict, a wrong-page blog and overlapping pages."""
    return {
        DALLAS: make_market(
            make_item(
                "water heater repair",
                volume=400,
                matches=[("/water-heater-repair", 3), ("/water-heater-repair-dallas-tx", 8)],
            ),
            make_item("water heater installation", path="/blog/water-heater-guide", position=4, volume=50),
            make_item("water heater repair dallas", path="/water-heater-repair-dallas-tx", position=2, volume=90),
            make_item("drain cleaning", path="/drain-cleaning", position=12, volume=70),
        ),
        HOUSTON: make_market(
            make_item("water heater repair", path="/water-heater-repair", position=5, volume=400),
            make_item("contact plumber", path="/contact", position=3, volume=40),
        ),
    }


# ============================================================================
# Crawl Fixtures
# ============================================================================

@pytest.fixture
def location_pages() -> List[CrawledPage]:
    """Crawl with location pages for three cities."""
    return [
        make_page("/", h1="Acme Plumbing"),
        make_page("/locations/dallas-tx", h1="Plumber in Dallas"),
        make_page("/locations/fort-worth-tx", h1="Plumber in Fort Worth"),
        make_page("/service-areas/raleigh-north-carolina", h1="Plumber in Raleigh"),
        make_page("/water-heater-repair", h1="Water Heater Repair"),
    ]
