"""
Collector Package

Ingestion boundary for upstream data:
- Rank-tracking market payloads and raw organic SERP responses -> MarketData
- On-page crawl results -> CrawledPage
- Google Maps rank annotation

Upstream JSON is validated with pydantic here so detectors only ever
receive typed records.

Usage:
    from siteaudit.collector import parse_markets, parse_crawled_pages

    markets = parse_markets(payload["markets"])
    pages = parse_crawled_pages(payload["pages"])
"""

from .errors import SerpDataError
from .serp import (
    annotate_maps_rankings,
    build_keyword_item,
    build_market_data,
    compute_market_metrics,
    estimated_traffic,
    extract_serp_matches,
    filter_keywords_for_market,
    parse_market_data,
    parse_markets,
    parse_serp_response,
)
from .crawl import parse_crawled_pages

__all__ = [
    "SerpDataError",
    "annotate_maps_rankings",
    "build_keyword_item",
    "build_market_data",
    "compute_market_metrics",
    "estimated_traffic",
    "extract_serp_matches",
    "filter_keywords_for_market",
    "parse_market_data",
    "parse_markets",
    "parse_serp_response",
    "parse_crawled_pages",
]
