"""
Market Discovery Module

Discovers the geographic markets a local business serves from its own
site, not from assumptions.

Signal sources (in order of preference):
1. Location-page URL slugs ("/locations/dallas-tx") - explicit
2. Business listing region - fallback for slugs without a state
3. City mentions in titles, descriptions and H1s - frequency based,
   used only when no location pages exist

Markets are expressed as "City,State,Country" strings, the key format
used throughout the engine.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from siteaudit.classifiers.helpers import (
    CA_PROVINCE_ABBREV_TO_NAME,
    CA_PROVINCE_NAMES,
    CANADA,
    STATE_NAME_TO_CANONICAL,
    UNITED_STATES,
    US_STATE_ABBREV_TO_NAME,
    US_STATE_NAMES,
    title_case,
)
from siteaudit.classifiers.url_type import classify_url_type
from siteaudit.models import (
    CityDetection,
    CrawledPage,
    DetectedBusiness,
    DiscoveredMarket,
    UrlType,
)
from siteaudit.utils.urls import extract_path

logger = logging.getLogger(__name__)


# Route words that precede the city slug ("/locations/dallas-tx")
GENERIC_ROUTE_SEGMENT = re.compile(r"^(locations?|areas?|cities|service-areas?|serving|coverage)$")

# "Dallas, TX" / "Fort Worth TX"
CITY_STATE_ABBREV_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*),?\s+([A-Z]{2})\b")

# "Dallas, Texas" / "Halifax Nova Scotia"
CITY_FULL_STATE_PATTERN = re.compile(
    r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*),?\s+((?i:"
    r"Alabama|Alaska|Arizona|Arkansas|California|Colorado|Connecticut|Delaware|Florida|"
    r"Georgia|Hawaii|Idaho|Illinois|Indiana|Iowa|Kansas|Kentucky|Louisiana|Maine|Maryland|"
    r"Massachusetts|Michigan|Minnesota|Mississippi|Missouri|Montana|Nebraska|Nevada|"
    r"New\s+Hampshire|New\s+Jersey|New\s+Mexico|New\s+York|North\s+Carolina|North\s+Dakota|"
    r"Ohio|Oklahoma|Oregon|Pennsylvania|Rhode\s+Island|South\s+Carolina|South\s+Dakota|"
    r"Tennessee|Texas|Utah|Vermont|Virginia|Washington|West\s+Virginia|Wisconsin|Wyoming|"
    r"Alberta|British\s+Columbia|Manitoba|New\s+Brunswick|Newfoundland|Nova\s+Scotia|"
    r"Ontario|Prince\s+Edward\s+Island|Quebec|Saskatchewan"
    r"))\b"
)

# A city must be mentioned more than this many times to be trusted
CITY_CONFIDENCE_THRESHOLD = 3


# =============================================================================
# HELPERS
# =============================================================================


def segment_to_city(segment: str) -> str:
    """
    Convert a hyphenated URL segment into a Title Case city name.

    "new-york" -> "New York"
    """
    return " ".join(part[:1].upper() + part[1:] for part in segment.split("-"))


def _country_for_business(business: DetectedBusiness) -> str:
    return CANADA if business.country in ("CA", "Canada") else UNITED_STATES


def extract_location_from_segment(
    segment: str,
    business_info: Optional[DetectedBusiness] = None,
) -> Optional[Tuple[str, str, str]]:
    """
    Extract (city, state, country) from one URL path segment.

    Tries, in order: a trailing 2-letter state/province code
    ("dallas-tx"), a trailing full state/province name
    ("raleigh-north-carolina"), then the business region.

    Returns:
        (city, state full name, country) or None
    """
    if not segment or len(segment) < 2:
        return None

    parts = segment.split("-")

    if len(parts) >= 2:
        tail = parts[-1].lower()
        city = segment_to_city("-".join(parts[:-1]))
        if tail in US_STATE_ABBREV_TO_NAME:
            return city, US_STATE_ABBREV_TO_NAME[tail], UNITED_STATES
        if tail in CA_PROVINCE_ABBREV_TO_NAME:
            return city, CA_PROVINCE_ABBREV_TO_NAME[tail], CANADA

    # Longest trailing run first so "dallas-west-virginia" resolves to West Virginia
    for i in range(1, len(parts)):
        candidate = " ".join(parts[i:]).lower()
        if candidate in US_STATE_NAMES:
            country = UNITED_STATES
        elif candidate in CA_PROVINCE_NAMES:
            country = CANADA
        else:
            continue
        city = segment_to_city("-".join(parts[:i]))
        state = segment_to_city("-".join(parts[i:]))
        return city, state, country

    if business_info is not None and business_info.region:
        city = segment_to_city(segment)
        if len(city) < 3:
            return None
        return city, business_info.region, _country_for_business(business_info)

    return None


def build_market_string(city: str, state: str, country: str = UNITED_STATES) -> str:
    """
    Build a "City,State,Country" market string.

    State abbreviations ("tx", "BC") are expanded to full names; full
    names are normalized to their canonical spelling. Anything else is
    title-cased as given.

    Examples:
        build_market_string("Austin", "tx") -> "Austin,Texas,United States"
        build_market_string("Austin", "texas") -> "Austin,Texas,United States"
    """
    state_key = (state or "").strip().lower()
    full_state = (
        US_STATE_ABBREV_TO_NAME.get(state_key)
        or CA_PROVINCE_ABBREV_TO_NAME.get(state_key)
        or STATE_NAME_TO_CANONICAL.get(" ".join(state_key.split()))
        or title_case(state or "")
    )
    return ",".join([(city or "").strip(), full_state, country])


def split_market_string(location: str) -> Tuple[str, str, str]:
    """Split "City,State,Country" into its three parts (missing parts are empty)."""
    parts = [p.strip() for p in (location or "").split(",")]
    parts += [""] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def market_city(location: str) -> str:
    """City part of a market string, or the whole string when it has none."""
    city = (location or "").split(",")[0].strip()
    return city or location


def space_location(location: str) -> str:
    """
    Re-format a market string with spaces after commas.

    "Dallas,Texas,United States" -> "Dallas, Texas, United States"
    """
    return ", ".join(p.strip() for p in (location or "").split(","))


# =============================================================================
# DISCOVERY
# =============================================================================


def discover_markets_from_crawl(
    pages: List[CrawledPage],
    business_info: Optional[DetectedBusiness] = None,
) -> List[DiscoveredMarket]:
    """
    Discover markets from location-page URLs.

    Each location-classified page contributes at most one market, taken
    from the last path segment that parses as a place. Markets are
    deduplicated by city+state, first page wins.

    Args:
        pages: Crawled pages
        business_info: Business listing, used for its region when a slug has no state

    Returns:
        Discovered markets in crawl order
    """
    seen: Dict[str, DiscoveredMarket] = {}

    for page in pages or []:
        if not page.url:
            continue
        if classify_url_type(page.url) != UrlType.LOCATION:
            continue

        segments = [s for s in extract_path(page.url).split("/") if s]

        for segment in reversed(segments):
            if GENERIC_ROUTE_SEGMENT.match(segment):
                continue

            location = extract_location_from_segment(segment, business_info)
            if location is None:
                continue

            city, state, country = location
            key = f"{city},{state}".lower()
            if key not in seen:
                seen[key] = DiscoveredMarket(
                    city=city,
                    location=f"{city},{state},{country}",
                    source="url",
                    page=page.url,
                )
            break

    markets = list(seen.values())
    logger.debug(f"Discovered {len(markets)} markets from {len(pages or [])} crawled pages")
    return markets


def _page_texts(page: CrawledPage) -> str:
    texts = []
    if page.title:
        texts.append(page.title)
    if page.description:
        texts.append(page.description)
    texts.extend(h for h in page.h1 if h)
    return " ".join(texts)


def detect_city_from_content(pages: List[CrawledPage]) -> Optional[CityDetection]:
    """
    Detect the primary city from page titles, descriptions and H1s.

    Content-based fallback for sites without location pages: counts
    "City, ST" and "City, State Name" mentions and returns the most
    mentioned city.

    Returns:
        CityDetection, or None when no city is mentioned more than
        CITY_CONFIDENCE_THRESHOLD times (insufficient signal)
    """
    # city (lowercase) -> [count, state, sources]
    mentions: Dict[str, list] = {}

    def record(city: str, state: str, url: str):
        key = city.lower()
        entry = mentions.get(key)
        if entry is None:
            mentions[key] = [1, state, [url]]
            return
        entry[0] += 1
        if url not in entry[2]:
            entry[2].append(url)

    for page in pages or []:
        combined = _page_texts(page)
        if not combined:
            continue

        for match in CITY_STATE_ABBREV_PATTERN.finditer(combined):
            city = match.group(1).strip()
            abbrev = match.group(2).lower()
            state = US_STATE_ABBREV_TO_NAME.get(abbrev) or CA_PROVINCE_ABBREV_TO_NAME.get(abbrev)
            if not state or len(city) < 3:
                continue
            record(city, state, page.url)

        for match in CITY_FULL_STATE_PATTERN.finditer(combined):
            city = match.group(1).strip()
            if len(city) < 3:
                continue
            record(city, title_case(match.group(2)), page.url)

    best_city = None
    best_entry = None
    for city, entry in mentions.items():
        if best_entry is None or entry[0] > best_entry[0]:
            best_city, best_entry = city, entry

    if best_entry is None or best_entry[0] <= CITY_CONFIDENCE_THRESHOLD:
        logger.debug("No city mentioned often enough to infer a market from content")
        return None

    count, state, sources = best_entry
    city_name = " ".join(word[:1].upper() + word[1:] for word in best_city.split(" "))
    country = CANADA if state.lower() in CA_PROVINCE_NAMES else UNITED_STATES

    return CityDetection(
        location=f"{city_name},{state},{country}",
        city=city_name,
        confidence=count,
        sources=list(sources),
    )
