"""
Site Audit Data Models

Defines all types used by the cannibalization engine:
- Page-type and keyword-intent classifications
- Upstream inputs (market keyword rankings, crawled pages, business info)
- Conflict reports emitted by the four detection tiers
- The page-centric ranking view

Every record serializes to plain JSON types via ``to_dict()``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# =============================================================================
# ENUMS
# =============================================================================


class UrlType(str, Enum):
    """Page category derived from a URL path."""
    HOMEPAGE = "homepage"
    SERVICE = "service"
    LOCATION = "location"
    BLOG = "blog"
    ABOUT = "about"
    CONTACT = "contact"
    GALLERY = "gallery"
    TESTIMONIALS = "testimonials"
    FAQ = "faq"
    OTHER = "other"


class KeywordIntent(str, Enum):
    """Presumed purpose behind a search query."""
    LOCAL_COMMERCIAL = "local-commercial"
    COMMERCIAL = "commercial"
    INFORMATIONAL = "informational"
    BRANDED = "branded"
    NAVIGATIONAL = "navigational"


class Severity(str, Enum):
    """Severity of a SERP-verified or wrong-page issue."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class OverlapRisk(str, Enum):
    """Risk level for keyword or content overlap between pages."""
    HIGH = "high"
    MEDIUM = "medium"


class SurfaceComparison(str, Enum):
    """Where a keyword ranks across organic and Maps results."""
    BOTH_RANKING = "both-ranking"
    ORGANIC_ONLY = "organic-only"
    MAPS_ONLY = "maps-only"
    NEITHER = "neither"


SEVERITY_ORDER: Dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
}

RISK_ORDER: Dict[OverlapRisk, int] = {
    OverlapRisk.HIGH: 0,
    OverlapRisk.MEDIUM: 1,
}

# Maps rank value used upstream when the business is not in the local pack
MAPS_NOT_FOUND = "NF"


# =============================================================================
# INPUTS
# =============================================================================


@dataclass
class SerpMatch:
    """One same-domain URL found in the organic results for a query."""
    url: str
    path: str
    position: int
    title: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "path": self.path,
            "position": self.position,
            "title": self.title,
            "description": self.description,
        }


@dataclass
class KeywordRankingItem:
    """
    A tracked keyword in one market with its best domain ranking.

    Produced by the collector and consumed read-only by every detector.
    ``position`` is 0 when the domain does not rank for the keyword.
    """
    keyword: str
    search_volume: int = 0
    cpc: float = 0.0

    # Best-ranked domain URL for the query
    position: int = 0
    url: str = ""
    relative_url: str = ""
    etv: float = 0.0

    # Every domain URL in the SERP (2+ means direct cannibalization)
    serp_matches: List[SerpMatch] = field(default_factory=list)
    is_cannibalized: bool = False
    serp_item_types: List[str] = field(default_factory=list)

    # Optional Google Maps ranking (int rank, MAPS_NOT_FOUND, or None if unchecked)
    maps_rank: Optional[Union[int, str]] = None
    maps_url: Optional[str] = None

    @property
    def surface_comparison(self) -> Optional[SurfaceComparison]:
        """Compare organic and Maps presence; None when Maps was not checked."""
        if self.maps_rank is None:
            return None
        has_organic = self.position > 0
        has_maps = self.maps_rank != MAPS_NOT_FOUND
        if has_organic and has_maps:
            return SurfaceComparison.BOTH_RANKING
        if has_organic:
            return SurfaceComparison.ORGANIC_ONLY
        if has_maps:
            return SurfaceComparison.MAPS_ONLY
        return SurfaceComparison.NEITHER

    def to_dict(self) -> Dict[str, Any]:
        surface = self.surface_comparison
        return {
            "keyword": self.keyword,
            "search_volume": self.search_volume,
            "cpc": self.cpc,
            "position": self.position,
            "url": self.url,
            "relative_url": self.relative_url,
            "etv": self.etv,
            "serp_matches": [m.to_dict() for m in self.serp_matches],
            "is_cannibalized": self.is_cannibalized,
            "serp_item_types": list(self.serp_item_types),
            "maps_rank": self.maps_rank,
            "maps_url": self.maps_url,
            "surface_comparison": surface.value if surface else None,
        }


@dataclass
class MapsSummary:
    """Maps check counts for one market."""
    checked: int = 0
    ranking: int = 0
    not_found: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "checked": self.checked,
            "ranking": self.ranking,
            "not_found": self.not_found,
        }


@dataclass
class MarketMetrics:
    """Aggregate organic metrics for one market."""
    count: int = 0
    etv: float = 0.0
    pos_1: int = 0
    pos_2_3: int = 0
    pos_4_10: int = 0
    pos_11_20: int = 0
    is_new: int = 0
    is_lost: int = 0
    maps: Optional[MapsSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "etv": self.etv,
            "pos_1": self.pos_1,
            "pos_2_3": self.pos_2_3,
            "pos_4_10": self.pos_4_10,
            "pos_11_20": self.pos_11_20,
            "is_new": self.is_new,
            "is_lost": self.is_lost,
            "maps": self.maps.to_dict() if self.maps else None,
        }


@dataclass
class MarketData:
    """All tracked keywords for one "City,State,Country" market."""
    items: List[KeywordRankingItem] = field(default_factory=list)
    total_count: int = 0
    metrics: Optional[MarketMetrics] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "total_count": self.total_count,
            "metrics": self.metrics.to_dict() if self.metrics else None,
        }


@dataclass
class CrawledPage:
    """On-page signals for one crawled URL."""
    url: str
    status_code: int = 200
    title: str = ""
    description: str = ""
    h1: List[str] = field(default_factory=list)
    word_count: int = 0

    @property
    def primary_heading(self) -> str:
        """First non-empty H1, or an empty string."""
        for heading in self.h1:
            if heading and heading.strip():
                return heading.strip()
        return ""


@dataclass
class DetectedBusiness:
    """Business listing details used as a fallback region for market discovery."""
    name: str = ""
    city: str = ""
    region: str = ""
    country: str = "US"
    address: str = ""
    phone: str = ""
    url: str = ""


@dataclass
class DiscoveredMarket:
    """A market location discovered from the site's own location pages."""
    city: str
    location: str             # "City,State,Country"
    source: str = "url"
    page: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "city": self.city,
            "location": self.location,
            "source": self.source,
            "page": self.page,
        }


@dataclass
class CityDetection:
    """Most-mentioned city found in page titles, descriptions and headings."""
    location: str
    city: str
    confidence: int           # Number of mentions
    sources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "city": self.city,
            "confidence": self.confidence,
            "sources": list(self.sources),
        }


# =============================================================================
# CLASSIFICATION RESULTS
# =============================================================================


@dataclass
class ConflictClassification:
    """Human-readable category and remediation for a page-type conflict."""
    type: str
    icon: str
    description: str
    fix: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "icon": self.icon,
            "description": self.description,
            "fix": self.fix,
        }


# =============================================================================
# TIER 1: SERP-VERIFIED CONFLICTS
# =============================================================================


@dataclass
class ConflictPage:
    """A domain URL appearing in a cannibalized SERP."""
    url: str
    path: str
    position: int
    title: str
    page_type: UrlType

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "path": self.path,
            "position": self.position,
            "title": self.title,
            "page_type": self.page_type.value,
        }


@dataclass
class CannibalizationConflict:
    """Two or more domain pages in the same SERP for one keyword and market."""
    keyword: str
    volume: int
    cpc: float
    market: str
    primary: ConflictPage
    competitors: List[ConflictPage]
    position_gap: int
    all_matches: List[SerpMatch]
    severity: Severity
    intent: KeywordIntent
    conflict_type: str
    conflict_icon: str
    conflict_description: str
    conflict_fix: str
    primary_type: UrlType
    competitor_type: UrlType
    wrong_page_winning: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "volume": self.volume,
            "cpc": self.cpc,
            "market": self.market,
            "primary": self.primary.to_dict(),
            "competitors": [c.to_dict() for c in self.competitors],
            "position_gap": self.position_gap,
            "all_matches": [m.to_dict() for m in self.all_matches],
            "severity": self.severity.value,
            "intent": self.intent.value,
            "conflict_type": self.conflict_type,
            "conflict_icon": self.conflict_icon,
            "conflict_description": self.conflict_description,
            "conflict_fix": self.conflict_fix,
            "primary_type": self.primary_type.value,
            "competitor_type": self.competitor_type.value,
            "wrong_page_winning": self.wrong_page_winning,
        }


# =============================================================================
# TIER 2: WRONG PAGE RANKING
# =============================================================================


@dataclass
class WrongPageRanking:
    """A single page ranking for a keyword whose intent it does not serve."""
    keyword: str
    volume: int
    position: int
    url: str
    path: str
    market: str
    page_type: UrlType
    intent: KeywordIntent
    ideal_page_type: UrlType
    reason: str
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "volume": self.volume,
            "position": self.position,
            "url": self.url,
            "path": self.path,
            "market": self.market,
            "page_type": self.page_type.value,
            "intent": self.intent.value,
            "ideal_page_type": self.ideal_page_type.value,
            "reason": self.reason,
            "severity": self.severity.value,
        }


# =============================================================================
# TIER 3: KEYWORD OVERLAP
# =============================================================================


@dataclass
class OverlapPage:
    """Summary of one ranking page in a keyword-overlap pair."""
    url: str
    path: str
    url_type: UrlType
    best_position: int
    keyword_count: int
    total_volume: int
    etv: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "path": self.path,
            "url_type": self.url_type.value,
            "best_position": self.best_position,
            "keyword_count": self.keyword_count,
            "total_volume": self.total_volume,
            "etv": self.etv,
        }


@dataclass
class NgramOverlapConflict:
    """Two ranking pages whose keyword sets share significant word n-grams."""
    page_a: OverlapPage
    page_b: OverlapPage
    shared_ngrams: List[str]
    overlap_pct: float
    shared_volume: int
    risk: OverlapRisk
    shared_keywords: List[str] = field(default_factory=list)

    @property
    def shared_count(self) -> int:
        return len(self.shared_ngrams)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_a": self.page_a.to_dict(),
            "page_b": self.page_b.to_dict(),
            "shared_ngrams": list(self.shared_ngrams),
            "shared_count": self.shared_count,
            "overlap_pct": self.overlap_pct,
            "shared_volume": self.shared_volume,
            "risk": self.risk.value,
            "shared_keywords": list(self.shared_keywords),
        }


@dataclass
class SharedKeyword:
    """A keyword both pages of an exact conflict rank for."""
    keyword: str
    volume: int
    position_a: int
    position_b: int
    market: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "volume": self.volume,
            "position_a": self.position_a,
            "position_b": self.position_b,
            "market": self.market,
        }


@dataclass
class ExactKeywordConflict:
    """Two ranking pages that rank for the identical keyword in the same market."""
    page_a: OverlapPage
    page_b: OverlapPage
    shared_keywords: List[SharedKeyword]
    total_shared_volume: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_a": self.page_a.to_dict(),
            "page_b": self.page_b.to_dict(),
            "shared_keywords": [k.to_dict() for k in self.shared_keywords],
            "total_shared_volume": self.total_shared_volume,
        }


# =============================================================================
# TIER 4: CONTENT OVERLAP
# =============================================================================


@dataclass
class ContentOverlapPage:
    """A crawled page participating in a content-overlap group."""
    url: str
    path: str
    url_type: UrlType
    title: str
    h1: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "path": self.path,
            "url_type": self.url_type.value,
            "title": self.title,
            "h1": self.h1,
        }


@dataclass
class ContentOverlapGroup:
    """Pages whose titles/H1s target the same specific topic."""
    pages: List[ContentOverlapPage]
    shared_phrases: List[str]
    risk: OverlapRisk
    conflict_type: str
    fix: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages": [p.to_dict() for p in self.pages],
            "shared_phrases": list(self.shared_phrases),
            "risk": self.risk.value,
            "conflict_type": self.conflict_type,
            "fix": self.fix,
        }


# =============================================================================
# RANKING PAGE MAP
# =============================================================================


@dataclass
class RankingKeyword:
    """One keyword a page ranks for in one market."""
    keyword: str
    position: int
    volume: int
    etv: float
    market: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "position": self.position,
            "volume": self.volume,
            "etv": self.etv,
            "market": self.market,
        }


@dataclass
class RankingPage:
    """Every keyword a single URL ranks for, across all markets."""
    url: str
    path: str
    url_type: UrlType
    keywords: List[RankingKeyword] = field(default_factory=list)
    kw_count: int = 0
    total_volume: int = 0
    total_etv: float = 0.0
    top_position: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "path": self.path,
            "url_type": self.url_type.value,
            "keywords": [k.to_dict() for k in self.keywords],
            "kw_count": self.kw_count,
            "total_volume": self.total_volume,
            "total_etv": self.total_etv,
            "top_position": self.top_position,
        }
