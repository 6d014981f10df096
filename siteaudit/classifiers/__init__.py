"""
Classifiers for the Site Audit Cannibalization Engine

Three pure, deterministic classifiers:

1. **URL type** - homepage, service, location, blog, ... from path patterns
2. **Keyword intent** - branded, informational, commercial, local-commercial
3. **Conflict type** - named conflict + fix for a pair of competing page types,
   plus wrong-page-winning and severity rules

Example Usage:
    from siteaudit.classifiers import (
        classify_url_type,
        classify_keyword_intent,
        classify_conflict_type,
    )

    classify_url_type("https://acme.com/plumber-dallas-tx")   # UrlType.LOCATION
    classify_keyword_intent("how to unclog a drain", "acme.com")  # INFORMATIONAL
"""

from .helpers import (
    CA_PROVINCE_ABBREV_TO_NAME,
    CA_PROVINCE_NAMES,
    PAGE_TYPE_LABELS,
    STATE_ABBREVS,
    US_STATE_ABBREV_TO_NAME,
    US_STATE_NAMES,
    page_type_label,
)
from .url_type import classify_url_type
from .intent import classify_keyword_intent, tracked_cities
from .conflict import (
    classify_conflict_type,
    classify_content_overlap,
    compute_severity,
    is_wrong_page_winning,
)

__all__ = [
    # Tables
    "CA_PROVINCE_ABBREV_TO_NAME",
    "CA_PROVINCE_NAMES",
    "PAGE_TYPE_LABELS",
    "STATE_ABBREVS",
    "US_STATE_ABBREV_TO_NAME",
    "US_STATE_NAMES",
    "page_type_label",

    # Classifiers
    "classify_url_type",
    "classify_keyword_intent",
    "tracked_cities",
    "classify_conflict_type",
    "classify_content_overlap",
    "compute_severity",
    "is_wrong_page_winning",
]
