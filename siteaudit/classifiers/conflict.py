"""
Conflict Classification

Turns a pair of competing page types into a named conflict with
remediation guidance, decides when the wrong page is winning, and
assigns severity to SERP-verified conflicts.
"""

from typing import Dict, FrozenSet, Iterable, Tuple

from siteaudit.models import ConflictClassification, KeywordIntent, Severity, UrlType

from .helpers import COMMERCIAL_INTENTS


# ============================================================================
# PAGE-PAIR CONFLICTS
# ============================================================================

CONFLICT_TYPES: Dict[FrozenSet[UrlType], ConflictClassification] = {
    frozenset({UrlType.HOMEPAGE, UrlType.SERVICE}): ConflictClassification(
        type="Homepage Authority Hogging",
        icon="🏠",
        description=(
            "Your homepage is ranking instead of a dedicated service page. The homepage's "
            "higher authority is pulling rank, but it can't convert as well as a focused "
            "service page."
        ),
        fix=(
            "Strengthen internal links from the homepage to the service page. Add the keyword "
            "to the service page's H1, title, and first paragraph. Consider adding a section "
            "on the homepage that explicitly links to service pages with descriptive anchor text."
        ),
    ),
    frozenset({UrlType.BLOG, UrlType.SERVICE}): ConflictClassification(
        type="Blog Stealing Service Traffic",
        icon="📝",
        description=(
            "A blog post is competing with a service page for a commercial keyword. Blog posts "
            "typically convert worse than service pages for transactional queries."
        ),
        fix=(
            "Add a prominent CTA and internal link from the blog post to the service page. "
            "Update the blog post to be more informational and the service page to be more "
            "transactional. Use canonical or noindex on the blog post if it's purely duplicative."
        ),
    ),
    frozenset({UrlType.LOCATION, UrlType.SERVICE}): ConflictClassification(
        type="Service vs. City Page Overlap",
        icon="📍",
        description=(
            "A generic service page and a city-specific page are competing. This usually means "
            "the city page isn't differentiated enough."
        ),
        fix=(
            "Add unique, location-specific content to the city page (local testimonials, service "
            "area details, local pricing). Ensure the service page targets the service broadly "
            "and the city page targets \"service + city\" specifically."
        ),
    ),
    frozenset({UrlType.LOCATION}): ConflictClassification(
        type="City Pages Cannibalizing Each Other",
        icon="🗺️",
        description=(
            "Two location/city pages are competing for the same keyword. This typically happens "
            "when city pages are too similar (template content with just the city name swapped)."
        ),
        fix=(
            "Add unique content to each city page: local case studies, city-specific service "
            "details, local staff bios, neighborhood-specific information. Each page needs 60%+ "
            "unique content."
        ),
    ),
    frozenset({UrlType.HOMEPAGE, UrlType.LOCATION}): ConflictClassification(
        type="Homepage vs. Location Page",
        icon="🏠📍",
        description=(
            "The homepage is competing with a location page for a local keyword. The homepage's "
            "authority advantage may override the location page's relevance."
        ),
        fix=(
            "Ensure the homepage focuses on brand + primary service area. Link prominently from "
            "the homepage to location pages. Make the location page hyper-specific to that city "
            "with unique local content."
        ),
    ),
    frozenset({UrlType.BLOG}): ConflictClassification(
        type="Blog Posts Competing",
        icon="📝📝",
        description=(
            "Two blog posts cover the same topic closely enough that Google can't decide which to "
            "rank. This splits your ranking potential between them."
        ),
        fix=(
            "Consolidate the weaker post into the stronger one (301 redirect). Or differentiate "
            "them clearly: one as a comprehensive guide, the other as a specific use case or FAQ."
        ),
    ),
    frozenset({UrlType.BLOG, UrlType.HOMEPAGE}): ConflictClassification(
        type="Blog Competing with Homepage",
        icon="📝🏠",
        description=(
            "A blog post is competing with the homepage. This usually means the homepage is too "
            "content-heavy or the blog post covers a core service topic."
        ),
        fix=(
            "If the keyword is branded/navigational, ensure the homepage is optimized for it. If "
            "informational, let the blog rank and add a strong CTA linking to homepage. Remove "
            "duplicate content from whichever page shouldn't rank for this term."
        ),
    ),
}

GENERIC_CONFLICT_FIX = (
    "Differentiate the pages clearly. Choose which page should rank for this keyword and "
    "strengthen it with better content, internal links, and on-page optimization. Consider "
    "using canonical tags or noindex on the secondary page."
)


def classify_conflict_type(
    primary_type: UrlType,
    competitor_type: UrlType,
    intent: KeywordIntent,
) -> ConflictClassification:
    """
    Classify a cannibalization conflict from the page types involved.

    The pair is unordered: homepage+service and service+homepage return
    the same classification. Unlisted pairs get a generic description
    naming both page types.
    """
    known = CONFLICT_TYPES.get(frozenset({primary_type, competitor_type}))
    if known is not None:
        return known

    return ConflictClassification(
        type="Page Conflict",
        icon="⚠️",
        description=(
            f"A {primary_type.value} page and a {competitor_type.value} page are competing for "
            f"the same keyword. Google is splitting ranking signals between them."
        ),
        fix=GENERIC_CONFLICT_FIX,
    )


def is_wrong_page_winning(
    primary_type: UrlType,
    competitor_type: UrlType,
    intent: KeywordIntent,
) -> bool:
    """
    True when a lower-converting page type outranks a better one.

    Only commercial and local-commercial intents qualify: a homepage
    beating a service/location page, or a blog beating a
    service/location/homepage.
    """
    if intent not in COMMERCIAL_INTENTS:
        return False

    if primary_type == UrlType.HOMEPAGE and competitor_type in (UrlType.SERVICE, UrlType.LOCATION):
        return True

    if primary_type == UrlType.BLOG and competitor_type in (
        UrlType.SERVICE, UrlType.LOCATION, UrlType.HOMEPAGE,
    ):
        return True

    return False


def compute_severity(volume: int, position: int, wrong_page_winning: bool) -> Severity:
    """
    Severity from search volume, primary position and wrong-page status.

    critical: wrong page winning with volume >= 200 or position <= 5,
              or volume >= 500 regardless
    high:     volume >= 100 or position <= 10
    medium:   everything else
    """
    if wrong_page_winning and (volume >= 200 or position <= 5):
        return Severity.CRITICAL
    if volume >= 500 or (position <= 3 and wrong_page_winning):
        return Severity.CRITICAL
    if volume >= 100 or position <= 10:
        return Severity.HIGH
    return Severity.MEDIUM


# ============================================================================
# CONTENT-OVERLAP GROUPS
# ============================================================================

CONTENT_OVERLAP_TYPES: Dict[str, Tuple[str, str]] = {
    "service-location": (
        "Service & City Pages Targeting the Same Topic",
        "Keep the service page as the broad page for this topic. Rewrite each city page to "
        "lead with its city in the first sentence and add location-only details (address, "
        "local reviews, service area) so it targets \"service + city\" instead.",
    ),
    "location-location": (
        "Templated City Pages",
        "Give every city page content that only makes sense for that city: local landmarks, "
        "the address, photos and reviews from customers there. Aim for 60%+ unique content "
        "per page.",
    ),
    "blog-involved": (
        "Blog Post Overlapping Core Pages",
        "Make the service or location page the definitive page for this topic. Rewrite the "
        "blog post to answer a specific question and link to the core page with descriptive "
        "anchor text.",
    ),
    "service-service": (
        "Service Pages Overlapping",
        "Decide which service page owns this topic. Narrow the other pages to distinct "
        "sub-services, or merge them and 301 redirect the weaker page.",
    ),
    "generic": (
        "Pages Targeting the Same Topic",
        "Pick one page as the primary page for this topic and strengthen it. Rewrite the "
        "titles and H1s of the other pages so each covers a distinct angle.",
    ),
}


def classify_content_overlap(page_types: Iterable[UrlType]) -> Tuple[str, str, str]:
    """
    Label a content-overlap group by the page types it contains.

    Returns:
        (key, conflict_type, fix) where key is one of CONTENT_OVERLAP_TYPES
    """
    types = list(page_types)
    services = types.count(UrlType.SERVICE)
    locations = types.count(UrlType.LOCATION)
    blogs = types.count(UrlType.BLOG)

    if services and locations:
        key = "service-location"
    elif locations >= 2:
        key = "location-location"
    elif blogs:
        key = "blog-involved"
    elif services >= 2:
        key = "service-service"
    else:
        key = "generic"

    conflict_type, fix = CONTENT_OVERLAP_TYPES[key]
    return key, conflict_type, fix
