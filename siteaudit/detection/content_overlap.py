"""
Tier 4: Content Overlap

Groups crawled pages whose H1s (or titles) target the same specific
topic. Works without any ranking data, so it catches cannibalization
on pages Google hasn't ranked yet.

Pipeline:
1. Target tokens from H1 or title (brand suffix, brand name, tracked
   cities, state codes, punctuation and stop words removed)
2. Consecutive-word bigrams, minus generic marketing phrases
3. Specificity filter: keep bigrams found on 2 to ceil(30%) of pages
4. Union-find: pages sharing a specific bigram join the same group
"""

import logging
import math
import re
from typing import Dict, List, Optional, Sequence, Set

from siteaudit.classifiers import classify_content_overlap, classify_url_type, tracked_cities
from siteaudit.classifiers.helpers import CONTENT_PAGE_TYPES, GENERIC_BIGRAMS, STOP_WORDS
from siteaudit.models import (
    RISK_ORDER,
    ContentOverlapGroup,
    ContentOverlapPage,
    CrawledPage,
    OverlapRisk,
)
from siteaudit.utils.urls import brand_from_domain, relative_path

logger = logging.getLogger(__name__)


# Everything after the first separator is assumed to be a brand suffix
TITLE_SEPARATOR = re.compile(r"\s*[|–—]\s*|\s+-\s+")
NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")

MIN_TOKEN_LENGTH = 3
MIN_DOCUMENT_FREQUENCY = 2
MAX_DOCUMENT_FREQUENCY_RATIO = 0.3
MIN_GROUP_SIZE = 2
HIGH_RISK_GROUP_SIZE = 3
MIN_HTTP_ERROR_STATUS = 400


def _remove_phrase(text: str, phrase: str) -> str:
    if not phrase:
        return text
    return re.sub(r"\b" + re.escape(phrase) + r"\b", " ", text)


def extract_target_tokens(text: str, brand: str = "", cities: Optional[Sequence[str]] = None) -> List[str]:
    """
    Reduce a heading or title to the words that say what the page targets.

    Example:
        extract_target_tokens("Water Heater Repair in Dallas, TX | Acme Plumbing",
                              brand="acme", cities=["dallas"])
        -> ["water", "heater", "repair"]
    """
    head = TITLE_SEPARATOR.split(text or "", maxsplit=1)[0].lower()

    if brand:
        head = _remove_phrase(head, brand)
        head = _remove_phrase(head, brand.replace("-", " "))
    for city in cities or []:
        head = _remove_phrase(head, city)

    head = NON_ALPHANUMERIC.sub(" ", head)
    return [
        token for token in head.split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def target_bigrams(tokens: Sequence[str]) -> Set[str]:
    """Consecutive-token bigrams, minus GENERIC_BIGRAMS."""
    bigrams = {f"{tokens[i]} {tokens[i + 1]}" for i in range(len(tokens) - 1)}
    return bigrams - GENERIC_BIGRAMS


def _find(parent: List[int], i: int) -> int:
    root = i
    while parent[root] != root:
        root = parent[root]
    # Path compression
    while parent[i] != root:
        parent[i], i = root, parent[i]
    return root


def _union(parent: List[int], a: int, b: int):
    root_a, root_b = _find(parent, a), _find(parent, b)
    if root_a != root_b:
        # Lower index stays root so group order follows page order
        parent[max(root_a, root_b)] = min(root_a, root_b)


def _shared_phrases(member_bigrams: List[Set[str]]) -> List[str]:
    """Bigrams common to every member, else those shared by at least half (min 2)."""
    common = set.intersection(*member_bigrams)
    if common:
        return sorted(common)

    counts: Dict[str, int] = {}
    for bigrams in member_bigrams:
        for bigram in bigrams:
            counts[bigram] = counts.get(bigram, 0) + 1

    threshold = max(MIN_GROUP_SIZE, math.ceil(len(member_bigrams) / 2))
    frequent = [(bigram, n) for bigram, n in counts.items() if n >= threshold]
    frequent.sort(key=lambda bn: (-bn[1], bn[0]))
    return [bigram for bigram, _ in frequent]


def detect_content_overlaps(
    pages: List[CrawledPage],
    domain: str,
    tracked_locations: Optional[Sequence[str]] = None,
) -> List[ContentOverlapGroup]:
    """
    Group pages whose headings target the same specific topic.

    Only service, location, blog and homepage pages that returned a
    non-error status are eligible.

    Args:
        pages: Crawled pages
        domain: Site domain, its brand name is removed from headings
        tracked_locations: "City,State,Country" strings, cities removed from headings

    Returns:
        Groups of 2+ pages sorted high risk first, then by page count descending
    """
    brand = brand_from_domain(domain or "")
    cities = tracked_cities(tracked_locations)

    eligible: List[ContentOverlapPage] = []
    page_bigrams: List[Set[str]] = []

    for page in pages or []:
        if not page.url or (page.status_code or 0) >= MIN_HTTP_ERROR_STATUS:
            continue
        url_type = classify_url_type(page.url)
        if url_type not in CONTENT_PAGE_TYPES:
            continue

        heading = page.primary_heading
        tokens = extract_target_tokens(heading or page.title, brand, cities)

        eligible.append(ContentOverlapPage(
            url=page.url,
            path=relative_path(page.url),
            url_type=url_type,
            title=page.title or "",
            h1=heading,
        ))
        page_bigrams.append(target_bigrams(tokens))

    n = len(eligible)
    if n < MIN_GROUP_SIZE:
        return []

    document_frequency: Dict[str, int] = {}
    for bigrams in page_bigrams:
        for bigram in bigrams:
            document_frequency[bigram] = document_frequency.get(bigram, 0) + 1

    max_df = math.ceil(n * MAX_DOCUMENT_FREQUENCY_RATIO)
    specific = {
        bigram for bigram, df in document_frequency.items()
        if MIN_DOCUMENT_FREQUENCY <= df <= max_df
    }
    specific_bigrams = [bigrams & specific for bigrams in page_bigrams]

    parent = list(range(n))
    first_page_with: Dict[str, int] = {}
    for i, bigrams in enumerate(specific_bigrams):
        for bigram in sorted(bigrams):
            if bigram in first_page_with:
                _union(parent, first_page_with[bigram], i)
            else:
                first_page_with[bigram] = i

    members: Dict[int, List[int]] = {}
    for i in range(n):
        members.setdefault(_find(parent, i), []).append(i)

    groups: List[ContentOverlapGroup] = []
    for indices in members.values():
        if len(indices) < MIN_GROUP_SIZE:
            continue

        shared = _shared_phrases([specific_bigrams[i] for i in indices])
        if not shared:
            continue

        group_pages = [eligible[i] for i in indices]
        _, conflict_type, fix = classify_content_overlap(p.url_type for p in group_pages)
        groups.append(ContentOverlapGroup(
            pages=group_pages,
            shared_phrases=shared,
            risk=OverlapRisk.HIGH if len(group_pages) >= HIGH_RISK_GROUP_SIZE else OverlapRisk.MEDIUM,
            conflict_type=conflict_type,
            fix=fix,
        ))

    groups.sort(key=lambda g: (RISK_ORDER[g.risk], -len(g.pages), g.pages[0].url))

    logger.debug(
        f"Tier 4: {len(groups)} content overlap groups from {n} pages "
        f"({len(specific)} specific phrases, max df {max_df})"
    )
    return groups
