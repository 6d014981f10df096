"""
Tier 3: Keyword Overlap Between Ranking Pages

Two page-pair detectors over ranked keyword data:

- N-gram overlap: pages whose ranking keywords share the same 2-3 word
  phrases, a sign they target the same topic even when no single
  keyword shows both pages in one SERP.
- Exact keyword conflicts: pages that rank for the identical keyword,
  with both positions side by side.

Utility pages (contact, about, gallery, testimonials, FAQ) are never
profiled.
"""

import logging
import re
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Set, Tuple

from siteaudit.classifiers import classify_url_type
from siteaudit.classifiers.helpers import UTILITY_PAGE_TYPES
from siteaudit.models import (
    RISK_ORDER,
    ExactKeywordConflict,
    MarketData,
    NgramOverlapConflict,
    OverlapPage,
    OverlapRisk,
    SharedKeyword,
    UrlType,
)
from siteaudit.utils.urls import relative_path

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MAX_RANKING_POSITION = 100
TOP_NGRAMS_PER_PAGE = 20
NGRAM_SIZES = (2, 3)
MIN_WORD_LENGTH = 3

MIN_SHARED_NGRAMS = 2
MIN_OVERLAP_PCT = 15.0
# Enough shared phrases to report regardless of percentage
STRONG_SHARED_NGRAMS = 3
HIGH_RISK_OVERLAP_PCT = 50.0

NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")


# =============================================================================
# PAGE PROFILES
# =============================================================================


@dataclass
class _RankedKeyword:
    keyword: str
    volume: int
    position: int
    market: str


@dataclass
class _PageProfile:
    url: str
    path: str
    url_type: UrlType
    keywords: Dict[str, _RankedKeyword] = field(default_factory=dict)
    etv: float = 0.0

    def add(self, keyword: str, volume: int, position: int, market: str, etv: float = 0.0):
        key = keyword.lower()
        existing = self.keywords.get(key)
        if existing is None:
            self.keywords[key] = _RankedKeyword(keyword, volume, position, market)
        else:
            existing.volume = max(existing.volume, volume)
            existing.position = min(existing.position, position)
        self.etv += etv

    @property
    def best_position(self) -> int:
        return min((k.position for k in self.keywords.values()), default=0)

    def summary(self) -> OverlapPage:
        return OverlapPage(
            url=self.url,
            path=self.path,
            url_type=self.url_type,
            best_position=self.best_position,
            keyword_count=len(self.keywords),
            total_volume=sum(k.volume for k in self.keywords.values()),
            etv=round(self.etv, 2),
        )


def _new_profile(url: str, path: str = "") -> _PageProfile:
    return _PageProfile(url=url, path=path or relative_path(url), url_type=classify_url_type(url))


def _build_page_profiles(markets: Dict[str, MarketData]) -> Dict[str, _PageProfile]:
    """One profile per non-utility URL ranking in positions 1-100."""
    profiles: Dict[str, _PageProfile] = {}

    for market_location, market_data in (markets or {}).items():
        for item in market_data.items:
            position = item.position or 0
            if not item.url or not item.keyword:
                continue
            if position < 1 or position > MAX_RANKING_POSITION:
                continue

            profile = profiles.get(item.url)
            if profile is None:
                profile = _new_profile(item.url, item.relative_url)
                profiles[item.url] = profile
            profile.add(item.keyword, item.search_volume or 0, position, market_location, item.etv or 0.0)

    return {url: p for url, p in profiles.items() if p.url_type not in UTILITY_PAGE_TYPES}


# =============================================================================
# N-GRAMS
# =============================================================================


def keyword_ngrams(keyword: str) -> Set[str]:
    """
    2- and 3-word phrases in a keyword.

    Lowercased, non-alphanumerics removed, words of 1-2 characters dropped.

    Example:
        "AC repair in Dallas TX" -> {"repair dallas"}
    """
    cleaned = NON_ALPHANUMERIC.sub("", (keyword or "").lower())
    words = [w for w in cleaned.split() if len(w) >= MIN_WORD_LENGTH]

    grams: Set[str] = set()
    for size in NGRAM_SIZES:
        for i in range(len(words) - size + 1):
            grams.add(" ".join(words[i:i + size]))
    return grams


def _top_ngrams(profile: _PageProfile) -> Set[str]:
    """The page's TOP_NGRAMS_PER_PAGE phrases, weighted by summed keyword volume."""
    weights: Dict[str, int] = {}
    for ranked in profile.keywords.values():
        for gram in keyword_ngrams(ranked.keyword):
            weights[gram] = weights.get(gram, 0) + ranked.volume

    ranked_grams = sorted(weights.items(), key=lambda kv: (-kv[1], kv[0]))
    return {gram for gram, _ in ranked_grams[:TOP_NGRAMS_PER_PAGE]}


def _keywords_containing(profile: _PageProfile, shared: Set[str]) -> List[_RankedKeyword]:
    return [k for k in profile.keywords.values() if keyword_ngrams(k.keyword) & shared]


def detect_ngram_overlaps(markets: Dict[str, MarketData]) -> List[NgramOverlapConflict]:
    """
    Find page pairs whose ranking keywords share 2-3 word phrases.

    A pair is reported when it shares at least MIN_SHARED_NGRAMS phrases
    and either the overlap (shared / smaller profile size) is at least
    MIN_OVERLAP_PCT or it shares STRONG_SHARED_NGRAMS phrases or more.

    Returns:
        Conflicts sorted high risk first, then by shared search volume
        descending
    """
    profiles = _build_page_profiles(markets)
    grams = {url: _top_ngrams(profile) for url, profile in profiles.items()}

    conflicts: List[NgramOverlapConflict] = []

    for url_a, url_b in combinations(profiles.keys(), 2):
        grams_a, grams_b = grams[url_a], grams[url_b]
        shared = grams_a & grams_b
        if len(shared) < MIN_SHARED_NGRAMS:
            continue

        overlap_pct = len(shared) / min(len(grams_a), len(grams_b)) * 100
        if overlap_pct < MIN_OVERLAP_PCT and len(shared) < STRONG_SHARED_NGRAMS:
            continue

        profile_a, profile_b = profiles[url_a], profiles[url_b]
        contributing = _keywords_containing(profile_a, shared) + _keywords_containing(profile_b, shared)

        conflicts.append(NgramOverlapConflict(
            page_a=profile_a.summary(),
            page_b=profile_b.summary(),
            shared_ngrams=sorted(shared),
            overlap_pct=round(overlap_pct, 1),
            shared_volume=sum(k.volume for k in contributing),
            risk=OverlapRisk.HIGH if overlap_pct >= HIGH_RISK_OVERLAP_PCT else OverlapRisk.MEDIUM,
            shared_keywords=sorted({k.keyword for k in contributing}),
        ))

    conflicts.sort(key=lambda c: (RISK_ORDER[c.risk], -c.shared_volume, c.page_a.url, c.page_b.url))

    logger.debug(f"Tier 3: {len(conflicts)} n-gram overlaps across {len(profiles)} pages")
    return conflicts


# =============================================================================
# EXACT KEYWORD CONFLICTS
# =============================================================================

# (market, lowercased keyword) -> URL -> that URL's ranking
KeywordRankings = Dict[Tuple[str, str], Dict[str, _RankedKeyword]]


def _build_keyword_positions(
    markets: Dict[str, MarketData],
) -> Tuple[Dict[str, _PageProfile], KeywordRankings]:
    """Profiles and per-market rankings from the ranking URL and every same-domain SERP match."""
    profiles: Dict[str, _PageProfile] = {}
    rankings: KeywordRankings = {}

    def record(market: str, keyword: str, volume: int, position: int,
               url: str, path: str = "", etv: float = 0.0):
        profile = profiles.get(url)
        if profile is None:
            profile = _new_profile(url, path)
            profiles[url] = profile
        profile.add(keyword, volume, position, market, etv)

        by_url = rankings.setdefault((market, keyword.lower()), {})
        existing = by_url.get(url)
        if existing is None:
            by_url[url] = _RankedKeyword(keyword, volume, position, market)
        else:
            existing.volume = max(existing.volume, volume)
            existing.position = min(existing.position, position)

    for market_location, market_data in (markets or {}).items():
        for item in market_data.items:
            if not item.keyword:
                continue
            volume = item.search_volume or 0
            position = item.position or 0

            if item.url and 1 <= position <= MAX_RANKING_POSITION:
                record(market_location, item.keyword, volume, position,
                       item.url, item.relative_url, item.etv or 0.0)
            for match in item.serp_matches:
                if match.url and match.url != item.url and match.position >= 1:
                    record(market_location, item.keyword, volume, match.position, match.url, match.path)

    profiles = {url: p for url, p in profiles.items() if p.url_type not in UTILITY_PAGE_TYPES}
    return profiles, rankings


def detect_exact_keyword_conflicts(markets: Dict[str, MarketData]) -> List[ExactKeywordConflict]:
    """
    Find page pairs ranking for the identical keyword in the same market.

    Keywords are matched case-insensitively. City pages that each rank in
    their own market are not paired. Each pair lists every shared keyword
    with both positions and the market they were seen in.

    Returns:
        Conflicts sorted by number of shared keywords, then combined
        volume, both descending
    """
    profiles, rankings = _build_keyword_positions(markets)

    pairs: Dict[Tuple[str, str], List[SharedKeyword]] = {}
    for (market, _), by_url in rankings.items():
        urls = sorted(url for url in by_url if url in profiles)
        if len(urls) < 2:
            continue
        for url_a, url_b in combinations(urls, 2):
            ranked_a, ranked_b = by_url[url_a], by_url[url_b]
            pairs.setdefault((url_a, url_b), []).append(SharedKeyword(
                keyword=ranked_a.keyword,
                volume=max(ranked_a.volume, ranked_b.volume),
                position_a=ranked_a.position,
                position_b=ranked_b.position,
                market=market,
            ))

    conflicts: List[ExactKeywordConflict] = []
    for (url_a, url_b), shared in pairs.items():
        shared.sort(key=lambda k: (-k.volume, k.keyword, k.market))
        conflicts.append(ExactKeywordConflict(
            page_a=profiles[url_a].summary(),
            page_b=profiles[url_b].summary(),
            shared_keywords=shared,
            total_shared_volume=sum(k.volume for k in shared),
        ))

    conflicts.sort(key=lambda c: (
        -len(c.shared_keywords), -c.total_shared_volume, c.page_a.url, c.page_b.url
    ))

    logger.debug(f"Exact keyword conflicts: {len(conflicts)} page pairs")
    return conflicts
