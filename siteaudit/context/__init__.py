"""
Context Package

Market discovery from crawl data:
- Location-page URL parsing ("/locations/dallas-tx" -> "Dallas,Texas,United States")
- Content-based city detection as a fallback
- Market string normalization

Usage:
    from siteaudit.context import discover_markets_from_crawl, detect_city_from_content

    markets = discover_markets_from_crawl(pages, business_info=None)
    if not markets:
        detection = detect_city_from_content(pages)
"""

from .market_discovery import (
    build_market_string,
    detect_city_from_content,
    discover_markets_from_crawl,
    extract_location_from_segment,
    market_city,
    segment_to_city,
    space_location,
    split_market_string,
)

__all__ = [
    "build_market_string",
    "detect_city_from_content",
    "discover_markets_from_crawl",
    "extract_location_from_segment",
    "market_city",
    "segment_to_city",
    "space_location",
    "split_market_string",
]
