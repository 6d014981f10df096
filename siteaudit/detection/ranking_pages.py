"""
Ranking Page Map

Page-centric view of keyword rankings: one entry per ranking URL with
every keyword it ranks for across markets. Supporting evidence for the
conflict tiers, not a detector itself.
"""

import logging
from typing import Dict, List, Set

from siteaudit.classifiers import classify_url_type
from siteaudit.models import MarketData, RankingKeyword, RankingPage
from siteaudit.utils.urls import relative_path

logger = logging.getLogger(__name__)


def build_ranking_page_map(markets: Dict[str, MarketData]) -> List[RankingPage]:
    """
    Aggregate ranking keywords by URL.

    Each page carries its keywords (best position first, then volume
    descending), distinct keyword count, total volume, total ETV and
    best position.

    Returns:
        Pages sorted by total ETV descending
    """
    pages: Dict[str, RankingPage] = {}

    for market_location, market_data in (markets or {}).items():
        for item in market_data.items:
            if not item.url or not item.keyword:
                continue
            position = item.position or 0
            if position < 1:
                continue

            page = pages.get(item.url)
            if page is None:
                page = RankingPage(
                    url=item.url,
                    path=item.relative_url or relative_path(item.url),
                    url_type=classify_url_type(item.url),
                )
                pages[item.url] = page

            volume = item.search_volume or 0
            etv = item.etv or 0.0
            page.keywords.append(RankingKeyword(
                keyword=item.keyword,
                position=position,
                volume=volume,
                etv=etv,
                market=market_location,
            ))
            page.total_volume += volume
            page.total_etv += etv
            if page.top_position == 0 or position < page.top_position:
                page.top_position = position

    for page in pages.values():
        page.keywords.sort(key=lambda k: (k.position, -k.volume))
        page.kw_count = len({k.keyword.lower() for k in page.keywords})
        page.total_etv = round(page.total_etv, 2)

    result = sorted(pages.values(), key=lambda p: -p.total_etv)

    logger.debug(f"Ranking page map: {len(result)} pages")
    return result


def find_competing_keywords(ranking_pages: List[RankingPage]) -> Set[str]:
    """Lowercased keywords that two or more distinct URLs rank for."""
    keyword_urls: Dict[str, Set[str]] = {}
    for page in ranking_pages or []:
        for kw in page.keywords:
            keyword_urls.setdefault(kw.keyword.lower(), set()).add(page.url)

    return {kw for kw, urls in keyword_urls.items() if len(urls) >= 2}
