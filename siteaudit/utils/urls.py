"""
URL and Domain Utilities

Defensive parsing shared by the classifiers, detectors and collector.
Every helper falls back to plain string handling when a value does not
parse as an absolute URL, so callers never see an exception.
"""

import re
from urllib.parse import urlparse

# TLDs stripped when deriving a brand token from a domain
BRAND_TLD_PATTERN = re.compile(r"\.(com|net|org|co|io|biz|info|us|ca|uk).*$", re.IGNORECASE)


def _parse_absolute(url: str):
    """Return urlparse() result for absolute URLs, None otherwise."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme and parsed.netloc:
        return parsed
    return None


def extract_path(url: str) -> str:
    """
    Lowercased URL path without trailing slashes.

    Inputs that are not absolute URLs are treated as a path in full.

    Examples:
        "https://acme.com/Services/" -> "/services"
        "https://acme.com/" -> ""
        "/blog/post" -> "/blog/post"
    """
    if not url:
        return ""
    parsed = _parse_absolute(url)
    path = parsed.path if parsed else url
    return path.lower().rstrip("/")


def relative_path(url: str) -> str:
    """Path component of an absolute URL, or the input unchanged."""
    if not url:
        return ""
    parsed = _parse_absolute(url)
    if parsed is None:
        return url
    return parsed.path or "/"


def extract_domain(url: str) -> str:
    """Hostname without ``www.``, lowercased."""
    if not url:
        return ""
    parsed = _parse_absolute(url)
    if parsed is not None:
        host = parsed.hostname or ""
    else:
        host = re.sub(r"^https?://", "", url, flags=re.IGNORECASE).split("/")[0]
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def normalize_domain(domain: str) -> str:
    """Strip scheme, ``www.``, path and case from a user-supplied domain."""
    if not domain:
        return ""
    return extract_domain(domain.strip())


def brand_from_domain(domain: str) -> str:
    """
    Brand token for a domain: the domain minus scheme, ``www.`` and TLD.

    Examples:
        "acme.com" -> "acme"
        "https://www.acme-plumbing.co.uk/" -> "acme-plumbing"
    """
    return BRAND_TLD_PATTERN.sub("", normalize_domain(domain)).lower()
