"""
Keyword Intent Classifier

Maps a keyword to a search intent using the domain's brand token,
question prefixes, commercial/transactional vocabulary and the cities
of the tracked markets.
"""

from typing import List, Optional, Sequence

from siteaudit.models import KeywordIntent
from siteaudit.utils.urls import brand_from_domain

from .helpers import (
    COMMERCIAL_INVESTIGATION,
    INFORMATIONAL_CONTAINS,
    INFORMATIONAL_STARTS,
    NEAR_ME_SIGNALS,
    TRANSACTIONAL,
)


def tracked_cities(tracked_locations: Optional[Sequence[str]]) -> List[str]:
    """
    Lowercased city names from "City,State,Country" location strings.

    Cities of two characters or fewer are dropped; they would match
    inside ordinary words.
    """
    cities = []
    for location in tracked_locations or []:
        city = (location or "").split(",")[0].strip().lower()
        if len(city) > 2:
            cities.append(city)
    return cities


def classify_keyword_intent(
    keyword: str,
    domain: str,
    tracked_locations: Optional[Sequence[str]] = None,
) -> KeywordIntent:
    """
    Classify keyword intent.

    Checks run in priority order and the first hit wins:
    branded, informational, near-me, commercial investigation,
    tracked city, transactional, then a word-count fallback.

    Args:
        keyword: Search query
        domain: Site domain ("acme.com"); its name minus TLD is the brand token
        tracked_locations: Market strings formatted "City,State,Country"

    Returns:
        KeywordIntent
    """
    kw = (keyword or "").lower().strip()

    brand = brand_from_domain(domain or "")
    if len(brand) > 2 and brand in kw:
        return KeywordIntent.BRANDED

    if kw.startswith(INFORMATIONAL_STARTS):
        return KeywordIntent.INFORMATIONAL
    if any(term in kw for term in INFORMATIONAL_CONTAINS):
        return KeywordIntent.INFORMATIONAL

    # "near me" outranks commercial modifiers: "best plumber near me" is a local search
    if any(signal in kw for signal in NEAR_ME_SIGNALS):
        return KeywordIntent.LOCAL_COMMERCIAL

    if any(term in kw for term in COMMERCIAL_INVESTIGATION):
        return KeywordIntent.COMMERCIAL

    # A tracked city alone is enough; transactional modifiers don't change the result
    if any(city in kw for city in tracked_cities(tracked_locations)):
        return KeywordIntent.LOCAL_COMMERCIAL

    if any(term in kw for term in TRANSACTIONAL):
        return KeywordIntent.COMMERCIAL

    return KeywordIntent.COMMERCIAL if len(kw.split()) <= 3 else KeywordIntent.INFORMATIONAL
