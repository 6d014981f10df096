"""
Classifier Constants and Lookup Tables

State/province maps, keyword signal lists, stop words and page-type
labels shared by the classifiers, market discovery and detectors.
All tables are built once at import time and never mutated.
"""

from typing import Dict, FrozenSet, Tuple

from siteaudit.models import KeywordIntent, UrlType


# ============================================================================
# US STATES / CANADIAN PROVINCES
# ============================================================================

US_STATE_ABBREV_TO_NAME: Dict[str, str] = {
    "al": "Alabama", "ak": "Alaska", "az": "Arizona", "ar": "Arkansas",
    "ca": "California", "co": "Colorado", "ct": "Connecticut", "de": "Delaware",
    "fl": "Florida", "ga": "Georgia", "hi": "Hawaii", "id": "Idaho",
    "il": "Illinois", "in": "Indiana", "ia": "Iowa", "ks": "Kansas",
    "ky": "Kentucky", "la": "Louisiana", "me": "Maine", "md": "Maryland",
    "ma": "Massachusetts", "mi": "Michigan", "mn": "Minnesota", "ms": "Mississippi",
    "mo": "Missouri", "mt": "Montana", "ne": "Nebraska", "nv": "Nevada",
    "nh": "New Hampshire", "nj": "New Jersey", "nm": "New Mexico", "ny": "New York",
    "nc": "North Carolina", "nd": "North Dakota", "oh": "Ohio", "ok": "Oklahoma",
    "or": "Oregon", "pa": "Pennsylvania", "ri": "Rhode Island", "sc": "South Carolina",
    "sd": "South Dakota", "tn": "Tennessee", "tx": "Texas", "ut": "Utah",
    "vt": "Vermont", "va": "Virginia", "wa": "Washington", "wv": "West Virginia",
    "wi": "Wisconsin", "wy": "Wyoming", "dc": "District of Columbia",
}

CA_PROVINCE_ABBREV_TO_NAME: Dict[str, str] = {
    "ab": "Alberta", "bc": "British Columbia", "mb": "Manitoba",
    "nb": "New Brunswick", "nl": "Newfoundland and Labrador", "ns": "Nova Scotia",
    "nt": "Northwest Territories", "nu": "Nunavut", "on": "Ontario",
    "pe": "Prince Edward Island", "qc": "Quebec", "sk": "Saskatchewan",
    "yt": "Yukon",
}

US_STATE_NAMES: FrozenSet[str] = frozenset(
    name.lower() for name in US_STATE_ABBREV_TO_NAME.values()
)
CA_PROVINCE_NAMES: FrozenSet[str] = frozenset(
    name.lower() for name in CA_PROVINCE_ABBREV_TO_NAME.values()
)

# Lowercase full name -> canonical full name
STATE_NAME_TO_CANONICAL: Dict[str, str] = {
    name.lower(): name
    for name in list(US_STATE_ABBREV_TO_NAME.values()) + list(CA_PROVINCE_ABBREV_TO_NAME.values())
}

STATE_ABBREVS: FrozenSet[str] = frozenset(US_STATE_ABBREV_TO_NAME) | frozenset(CA_PROVINCE_ABBREV_TO_NAME)

UNITED_STATES = "United States"
CANADA = "Canada"


# ============================================================================
# URL CLASSIFICATION
# ============================================================================

# Single-segment paths that are never service pages
UTILITY_PAGES: FrozenSet[str] = frozenset({
    "privacy", "privacy-policy", "terms", "terms-of-service", "terms-and-conditions",
    "sitemap", "sitemap.xml", "robots.txt", "careers", "jobs", "login", "signup",
    "register", "account", "cart", "checkout", "search", "wp-admin", "wp-login",
    "feed", "rss", "amp", "404", "thank-you", "thanks", "confirmation",
})

# Page types that should never be compared as keyword targets
UTILITY_PAGE_TYPES: FrozenSet[UrlType] = frozenset({
    UrlType.CONTACT,
    UrlType.ABOUT,
    UrlType.GALLERY,
    UrlType.TESTIMONIALS,
    UrlType.FAQ,
})


# ============================================================================
# KEYWORD INTENT SIGNALS
# ============================================================================

INFORMATIONAL_STARTS: Tuple[str, ...] = (
    "how to", "what is", "what are", "why do", "why does", "why is", "why are",
    "when to", "when should", "where to", "where can", "who is", "who are",
    "can you", "can i", "should i", "should you", "is it", "are there",
    "do i need", "does", "which",
)

INFORMATIONAL_CONTAINS: Tuple[str, ...] = (
    "tips", "guide", "tutorial", "how-to", "checklist", "ideas",
    "examples", "steps", "ways to", "pros and cons", "vs ", "versus",
    "benefits of", "advantages", "disadvantages", "difference between",
    "meaning", "definition",
)

COMMERCIAL_INVESTIGATION: Tuple[str, ...] = (
    "cost", "price", "pricing", "how much", "best", "top", "compare",
    "comparison", "reviews", "review", "rated", "rating", "ratings",
    "worth it", "alternatives", "vs",
)

NEAR_ME_SIGNALS: Tuple[str, ...] = ("near me", "nearby", "in my area")

TRANSACTIONAL: Tuple[str, ...] = (
    "buy", "hire", "book", "schedule", "order", "purchase", "get a quote",
    "request a quote", "free estimate", "free quote", "call", "contact",
    "repair", "install", "installation", "replace", "replacement",
    "removal", "remove", "fix", "service", "services", "company",
    "companies", "contractor", "contractors", "professional", "professionals",
    "specialist", "specialists", "expert", "experts", "provider", "providers",
)

COMMERCIAL_INTENTS: FrozenSet[KeywordIntent] = frozenset({
    KeywordIntent.COMMERCIAL,
    KeywordIntent.LOCAL_COMMERCIAL,
})


# ============================================================================
# CONTENT OVERLAP TOKENS
# ============================================================================

STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "for", "of", "to", "in", "on", "at",
    "by", "with", "from", "into", "about", "your", "our", "you", "we", "us",
    "they", "their", "is", "are", "was", "be", "been", "it", "its", "this",
    "that", "these", "those", "as", "all", "any", "can", "will", "not", "no",
    "more", "most", "very", "just", "than", "then", "also", "near", "me", "my",
    "how", "what", "why", "who", "when", "where", "get", "welcome", "home",
    "page", "llc", "inc",
})

# Marketing phrases common to every page of a local-business site
GENERIC_BIGRAMS: FrozenSet[str] = frozenset({
    "near me", "contact us", "about us", "call today", "call now",
    "free estimate", "free estimates", "free quote", "get started",
    "learn more", "read more", "our services", "our team", "request quote",
    "schedule service", "family owned", "locally owned",
})

CONTENT_PAGE_TYPES: FrozenSet[UrlType] = frozenset({
    UrlType.SERVICE,
    UrlType.LOCATION,
    UrlType.BLOG,
    UrlType.HOMEPAGE,
})


# ============================================================================
# DISPLAY LABELS
# ============================================================================

PAGE_TYPE_LABELS: Dict[UrlType, Dict[str, str]] = {
    UrlType.HOMEPAGE: {"label": "Homepage", "icon": "🏠"},
    UrlType.SERVICE: {"label": "Service Page", "icon": "🔧"},
    UrlType.LOCATION: {"label": "City Page", "icon": "📍"},
    UrlType.BLOG: {"label": "Blog Post", "icon": "📝"},
    UrlType.ABOUT: {"label": "About Page", "icon": "👥"},
    UrlType.CONTACT: {"label": "Contact Page", "icon": "📞"},
    UrlType.GALLERY: {"label": "Gallery Page", "icon": "🖼️"},
    UrlType.TESTIMONIALS: {"label": "Reviews Page", "icon": "⭐"},
    UrlType.FAQ: {"label": "FAQ Page", "icon": "❓"},
    UrlType.OTHER: {"label": "Other Page", "icon": "📄"},
}


def page_type_label(url_type: UrlType) -> str:
    """Lowercase display label for a page type ("service page")."""
    return PAGE_TYPE_LABELS[url_type]["label"].lower()


def title_case(text: str) -> str:
    """Uppercase the first letter of each whitespace-separated word, lowercase the rest."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())
