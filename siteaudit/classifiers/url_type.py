"""
URL Type Classifier

Maps a URL to a page category using path-pattern heuristics.
First match wins; the order of checks below is significant.
"""

import re

from siteaudit.models import UrlType
from siteaudit.utils.urls import extract_path

from .helpers import STATE_ABBREVS, UTILITY_PAGES


HOMEPAGE_PATTERN = re.compile(r"^/index\.(html?|php)$")
CONTACT_PATTERN = re.compile(r"^/(contact|get-in-touch|request|schedule|book)")
ABOUT_PATTERN = re.compile(r"^/(about|who-we-are|our-team|our-story)")
GALLERY_PATTERN = re.compile(r"^/(gallery|portfolio|projects|our-work|our-projects)")
TESTIMONIALS_PATTERN = re.compile(r"^/(testimonials|reviews|customer-reviews|client-reviews)")
FAQ_PATTERN = re.compile(r"^/(faq|frequently-asked|help|knowledge-base)")
BLOG_PATTERN = re.compile(r"^/(blog|posts|articles|news|category|tag|author)")
DATE_PATTERN = re.compile(r"/\d{4}/\d{2}/")
BLOG_SLUG_PATTERN = re.compile(r"^(how-to|why-|guide-to|what-is|what-are|tips-for|top-\d+|best-)")
LOCATION_PATTERN = re.compile(r"^/(locations|areas|cities|service-area|service-areas|serving|coverage)")
LOCATION_SLUG_PATTERN = re.compile(r"-(in|near|for|serving)-")
SERVICE_PATTERN = re.compile(r"^/(services|solutions|what-we-do|our-services)")


def classify_url_type(url: str) -> UrlType:
    """
    Classify a URL into a page type based on path patterns.

    Never raises: malformed or relative URLs are classified from the
    raw string treated as a path.

    Args:
        url: Absolute URL or path

    Returns:
        UrlType for the page
    """
    path = extract_path(url or "")

    if not path or path == "/" or HOMEPAGE_PATTERN.match(path):
        return UrlType.HOMEPAGE

    segments = [s for s in path.split("/") if s]
    first_seg = segments[0] if segments else ""
    last_seg = segments[-1] if segments else ""
    full_path = "/" + "/".join(segments)

    if CONTACT_PATTERN.match(full_path):
        return UrlType.CONTACT
    if ABOUT_PATTERN.match(full_path):
        return UrlType.ABOUT
    if GALLERY_PATTERN.match(full_path):
        return UrlType.GALLERY
    if TESTIMONIALS_PATTERN.match(full_path):
        return UrlType.TESTIMONIALS
    if FAQ_PATTERN.match(full_path):
        return UrlType.FAQ

    # Blog: section prefix, /YYYY/MM/ date folders, or article-style slugs
    if BLOG_PATTERN.match(full_path):
        return UrlType.BLOG
    if DATE_PATTERN.search(full_path):
        return UrlType.BLOG
    if BLOG_SLUG_PATTERN.match(last_seg):
        return UrlType.BLOG

    # Location: section prefix, "-in-"/"-near-" slugs, or a trailing state code
    if LOCATION_PATTERN.match(full_path):
        return UrlType.LOCATION
    if LOCATION_SLUG_PATTERN.search(last_seg):
        return UrlType.LOCATION
    slug_parts = last_seg.split("-")
    if len(slug_parts) >= 2 and slug_parts[-1] in STATE_ABBREVS:
        return UrlType.LOCATION

    if SERVICE_PATTERN.match(full_path):
        return UrlType.SERVICE
    if len(segments) == 1 and first_seg not in UTILITY_PAGES:
        return UrlType.SERVICE

    return UrlType.OTHER
