"""
SERP and Keyword Ingestion

Validates upstream rank-tracking payloads and converts them into the
engine's MarketData records. This is the only place loosely-typed
upstream JSON is accepted; detectors only ever see validated records.

Two input shapes are supported:

1. Market payloads already assembled upstream:
   {"Dallas,Texas,United States": {"items": [...], "totalCount": 12}}
   Each item carries keyword_data / ranked_serp_element plus the
   ``_serpMatches`` / ``_isCannibalized`` / ``_mapsRank`` annotations.

2. Raw organic SERP responses (tasks -> result -> items), turned into
   keyword items by finding every result on the audited domain.
"""

import logging
import math
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field, ValidationError

from siteaudit.models import (
    MAPS_NOT_FOUND,
    KeywordRankingItem,
    MapsSummary,
    MarketData,
    MarketMetrics,
    SerpMatch,
)
from siteaudit.utils.config import get_settings
from siteaudit.utils.urls import extract_domain, normalize_domain, relative_path

from .errors import SerpDataError

logger = logging.getLogger(__name__)


# Position recorded for a match that carries no rank
UNRANKED_POSITION = 999
SUCCESS_STATUS_CODE = 20000


# =============================================================================
# PAYLOAD MODELS
# =============================================================================


class KeywordInfoPayload(BaseModel):
    """keyword_data.keyword_info"""
    search_volume: Optional[int] = None
    cpc: Optional[float] = None

    class Config:
        extra = "ignore"


class KeywordDataPayload(BaseModel):
    keyword: str
    keyword_info: Optional[KeywordInfoPayload] = None

    class Config:
        extra = "ignore"


class SerpItemPayload(BaseModel):
    """ranked_serp_element.serp_item, or one organic result in a SERP response."""
    type: Optional[str] = None
    rank_group: Optional[int] = None
    rank_absolute: Optional[int] = None
    url: Optional[str] = None
    relative_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    etv: Optional[float] = None

    class Config:
        extra = "ignore"

    @property
    def position(self) -> int:
        return self.rank_group or self.rank_absolute or 0


class RankedSerpElementPayload(BaseModel):
    serp_item: SerpItemPayload = Field(default_factory=SerpItemPayload)

    class Config:
        extra = "ignore"


class SerpMatchPayload(BaseModel):
    url: str
    path: Optional[str] = None
    # null when the position was not captured
    position: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None

    class Config:
        extra = "ignore"


class MarketItemPayload(BaseModel):
    """One keyword item inside a market payload."""
    keyword_data: KeywordDataPayload
    ranked_serp_element: RankedSerpElementPayload = Field(default_factory=RankedSerpElementPayload)
    serp_item_types: List[str] = Field(default_factory=list)
    serp_matches: List[SerpMatchPayload] = Field(default_factory=list, alias="_serpMatches")
    is_cannibalized: Optional[bool] = Field(default=None, alias="_isCannibalized")
    maps_rank: Optional[Union[int, str]] = Field(default=None, alias="_mapsRank")
    maps_url: Optional[str] = Field(default=None, alias="_mapsUrl")

    class Config:
        extra = "ignore"
        populate_by_name = True


class SerpResultPayload(BaseModel):
    """tasks[i].result[0] of an organic SERP response."""
    keyword: Optional[str] = None
    item_types: List[str] = Field(default_factory=list)
    items: List[SerpItemPayload] = Field(default_factory=list)
    keyword_info: Optional[KeywordInfoPayload] = None

    class Config:
        extra = "ignore"


# =============================================================================
# SERP MATCHING
# =============================================================================


def extract_serp_matches(serp_items: Iterable[Any], domain: str) -> List[SerpMatch]:
    """
    Every organic result on the audited domain, in SERP order.

    Args:
        serp_items: SerpItemPayload objects or raw result dicts
        domain: Audited domain ("acme.com", "www.acme.com" and full URLs accepted)

    Returns:
        SerpMatch list; two or more entries means direct cannibalization
    """
    target = normalize_domain(domain)
    matches: List[SerpMatch] = []
    if not target:
        return matches

    for raw in serp_items or []:
        si = raw if isinstance(raw, SerpItemPayload) else _validate_serp_item(raw)
        if si is None or not si.url:
            continue
        if extract_domain(si.url) != target:
            continue
        matches.append(SerpMatch(
            url=si.url,
            path=relative_path(si.url),
            position=si.position or UNRANKED_POSITION,
            title=si.title or "",
            description=si.description or "",
        ))
    return matches


def _validate_serp_item(raw: Any) -> Optional[SerpItemPayload]:
    try:
        return SerpItemPayload.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Skipping malformed SERP result: {e.error_count()} validation errors")
        return None


def estimated_traffic(position: int) -> int:
    """ETV for a position: 100 / position rounded half up, 0 when not ranking."""
    if position <= 0:
        return 0
    return max(0, int(math.floor(100 / position + 0.5)))


def build_keyword_item(
    keyword: str,
    serp_items: Iterable[Any],
    domain: str,
    keyword_info: Optional[KeywordInfoPayload] = None,
    item_types: Optional[Sequence[str]] = None,
) -> KeywordRankingItem:
    """
    Build a KeywordRankingItem from one query's organic results.

    The best-positioned domain match becomes the item's ranking URL.
    """
    matches = extract_serp_matches(serp_items, domain)
    primary = min(matches, key=lambda m: m.position) if matches else None
    position = primary.position if primary else 0

    return KeywordRankingItem(
        keyword=keyword,
        search_volume=(keyword_info.search_volume if keyword_info else None) or 0,
        cpc=(keyword_info.cpc if keyword_info else None) or 0.0,
        position=position,
        url=primary.url if primary else "",
        relative_url=primary.path if primary else "",
        etv=estimated_traffic(position),
        serp_matches=matches,
        is_cannibalized=len(matches) > 1,
        serp_item_types=list(item_types or []),
    )


# =============================================================================
# MARKET ASSEMBLY
# =============================================================================


def compute_market_metrics(items: Sequence[KeywordRankingItem]) -> MarketMetrics:
    """Position distribution and total ETV for a market's items."""
    metrics = MarketMetrics(count=len(items))
    for item in items:
        position = item.position
        if position == 1:
            metrics.pos_1 += 1
        elif 2 <= position <= 3:
            metrics.pos_2_3 += 1
        elif 4 <= position <= 10:
            metrics.pos_4_10 += 1
        elif 11 <= position <= 20:
            metrics.pos_11_20 += 1
        metrics.etv += item.etv or 0
    return metrics


def build_market_data(items: List[KeywordRankingItem]) -> MarketData:
    return MarketData(items=items, total_count=len(items), metrics=compute_market_metrics(items))


def filter_keywords_for_market(
    keywords: Iterable[str],
    market_city: str,
    all_cities: Iterable[str],
    limit: Optional[int] = None,
) -> List[str]:
    """
    Keywords worth checking in one market.

    Drops keywords naming any other tracked city ("plumber dallas" is not
    checked in the Houston market) and keeps the first ``limit``
    (MAX_KEYWORDS_PER_MARKET by default).
    """
    if limit is None:
        limit = get_settings().MAX_KEYWORDS_PER_MARKET

    own = (market_city or "").strip().lower()
    others = [c.strip().lower() for c in all_cities or [] if c and c.strip().lower() != own]

    kept = [kw for kw in keywords or [] if not any(city in kw.lower() for city in others)]
    return kept[:limit]


def parse_serp_response(
    response: Mapping[str, Any],
    keywords: Sequence[str],
    domain: str,
) -> MarketData:
    """
    Build one market's data from an organic SERP response.

    ``keywords`` lists the queried keywords in task order. Tasks that
    failed upstream or returned no result are skipped.

    Raises:
        SerpDataError: response is not a mapping or its tasks are not a list
    """
    if not isinstance(response, Mapping):
        raise SerpDataError("SERP response must be an object", source="serp", payload=response)

    tasks = response.get("tasks") or []
    if not isinstance(tasks, list):
        raise SerpDataError("SERP response 'tasks' must be a list", source="serp", payload=response)

    items: List[KeywordRankingItem] = []
    for i, task in enumerate(tasks):
        if not isinstance(task, Mapping) or task.get("status_code") != SUCCESS_STATUS_CODE:
            continue
        results = task.get("result")
        if not results or not isinstance(results, list):
            continue

        try:
            result = SerpResultPayload.model_validate(results[0])
        except ValidationError as e:
            logger.warning(f"Skipping malformed SERP task {i}: {e.error_count()} validation errors")
            continue

        keyword = keywords[i] if i < len(keywords) else (result.keyword or "")
        if not keyword:
            continue
        items.append(build_keyword_item(keyword, result.items, domain, result.keyword_info, result.item_types))

    ranking = sum(1 for item in items if item.position > 0)
    logger.debug(f"SERP response: {ranking}/{len(items)} keywords ranking")
    return build_market_data(items)


# =============================================================================
# MARKET PAYLOADS
# =============================================================================


def _item_from_payload(payload: MarketItemPayload) -> KeywordRankingItem:
    info = payload.keyword_data.keyword_info
    si = payload.ranked_serp_element.serp_item
    position = si.position

    matches = [
        SerpMatch(
            url=m.url,
            path=m.path or relative_path(m.url),
            position=m.position if m.position is not None else UNRANKED_POSITION,
            title=m.title or "",
            description=m.description or "",
        )
        for m in payload.serp_matches
    ]
    is_cannibalized = payload.is_cannibalized if payload.is_cannibalized is not None else len(matches) > 1

    return KeywordRankingItem(
        keyword=payload.keyword_data.keyword,
        search_volume=(info.search_volume if info else None) or 0,
        cpc=(info.cpc if info else None) or 0.0,
        position=position,
        url=si.url or "",
        relative_url=si.relative_url or (relative_path(si.url) if si.url else ""),
        etv=si.etv if si.etv is not None else estimated_traffic(position),
        serp_matches=matches,
        is_cannibalized=is_cannibalized,
        serp_item_types=list(payload.serp_item_types),
        maps_rank=payload.maps_rank,
        maps_url=payload.maps_url,
    )


def parse_market_data(payload: Any, location: str = "") -> MarketData:
    """
    Validate one market payload.

    Malformed items are logged and skipped; metrics are recomputed from
    the surviving items.

    Raises:
        SerpDataError: payload is not an object or ``items`` is not a list
    """
    if not isinstance(payload, Mapping):
        raise SerpDataError(f"Market data for '{location}' must be an object", source="markets", payload=payload)

    raw_items = payload.get("items") or []
    if not isinstance(raw_items, list):
        raise SerpDataError(f"Market '{location}' items must be a list", source="markets", payload=payload)

    items: List[KeywordRankingItem] = []
    for i, raw in enumerate(raw_items):
        try:
            items.append(_item_from_payload(MarketItemPayload.model_validate(raw)))
        except ValidationError as e:
            logger.warning(f"Skipping malformed item {i} in market '{location}': {e.error_count()} validation errors")

    return build_market_data(items)


def parse_markets(payload: Any) -> Dict[str, MarketData]:
    """
    Validate a location -> market payload mapping.

    Raises:
        SerpDataError: payload is not an object, or a market is malformed
    """
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise SerpDataError("Markets payload must be an object keyed by location", source="markets", payload=payload)

    markets = {location: parse_market_data(data, location) for location, data in payload.items()}
    logger.debug(f"Parsed {len(markets)} markets, {sum(m.total_count for m in markets.values())} keyword items")
    return markets


# =============================================================================
# MAPS
# =============================================================================


def annotate_maps_rankings(market: MarketData, maps_results: Mapping[str, Any]) -> MarketData:
    """
    Attach Google Maps ranks to a market's items.

    Args:
        market: Market to annotate (left unchanged)
        maps_results: keyword -> rank (int or "NF"), or keyword ->
            {"rank": ..., "url": ...}

    Returns:
        New MarketData with maps_rank/maps_url set and a Maps summary
        in its metrics. Keywords absent from ``maps_results`` are left
        unchecked (maps_rank None).
    """
    items: List[KeywordRankingItem] = []
    ranking = not_found = 0

    for item in market.items:
        result = (maps_results or {}).get(item.keyword)
        if result is None:
            items.append(replace(item, maps_rank=None, maps_url=None))
            continue

        if isinstance(result, Mapping):
            rank = result.get("rank") or MAPS_NOT_FOUND
            url = result.get("url") or ""
        else:
            rank, url = result, ""

        if rank == MAPS_NOT_FOUND:
            not_found += 1
        else:
            ranking += 1
        items.append(replace(item, maps_rank=rank, maps_url=url))

    checked = ranking + not_found
    metrics = replace(market.metrics) if market.metrics else compute_market_metrics(items)
    metrics.maps = MapsSummary(checked=checked, ranking=ranking, not_found=not_found)

    logger.debug(f"Maps: {ranking}/{checked} checked keywords found in the local pack")
    return MarketData(items=items, total_count=market.total_count, metrics=metrics)
