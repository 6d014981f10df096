"""
Crawl Ingestion

Validates on-page crawl results into CrawledPage records for market
discovery and content-overlap detection.

Accepts the upstream on-page item shape:
    {"url": ..., "status_code": 200,
     "meta": {"title": ..., "description": ..., "htags": {"h1": [...]},
              "content": {"plain_text_word_count": 850}}}
as well as a flat shape ({"url", "title", "description", "h1"}).
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from siteaudit.models import CrawledPage

from .errors import SerpDataError

logger = logging.getLogger(__name__)


class HtagsPayload(BaseModel):
    h1: List[str] = Field(default_factory=list)

    class Config:
        extra = "ignore"


class ContentPayload(BaseModel):
    plain_text_word_count: Optional[int] = None

    class Config:
        extra = "ignore"


class PageMetaPayload(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    htags: Optional[HtagsPayload] = None
    content: Optional[ContentPayload] = None

    class Config:
        extra = "ignore"


class CrawledPagePayload(BaseModel):
    """One crawled page."""
    url: str
    status_code: Optional[int] = None
    meta: Optional[PageMetaPayload] = None

    # Flat shape
    title: Optional[str] = None
    description: Optional[str] = None
    h1: Optional[Union[List[str], str]] = None
    word_count: Optional[int] = None

    class Config:
        extra = "ignore"

    def to_page(self) -> CrawledPage:
        meta = self.meta or PageMetaPayload()

        if isinstance(self.h1, str):
            headings = [self.h1]
        elif self.h1 is not None:
            headings = list(self.h1)
        else:
            headings = list(meta.htags.h1) if meta.htags else []

        word_count = self.word_count
        if word_count is None and meta.content:
            word_count = meta.content.plain_text_word_count

        return CrawledPage(
            url=self.url,
            status_code=self.status_code if self.status_code is not None else 200,
            title=self.title or meta.title or "",
            description=self.description or meta.description or "",
            h1=[h.strip() for h in headings if h and h.strip()],
            word_count=word_count or 0,
        )


def parse_crawled_pages(payload: Any) -> List[CrawledPage]:
    """
    Validate crawl results.

    Args:
        payload: List of page objects, or an object with an ``items`` list

    Returns:
        CrawledPage list in input order; malformed pages are logged and skipped

    Raises:
        SerpDataError: payload is neither a list nor an object with an items list
    """
    if payload is None:
        return []

    raw_pages = payload.get("items") if isinstance(payload, Mapping) else payload
    if raw_pages is None:
        raw_pages = []
    if not isinstance(raw_pages, list):
        raise SerpDataError("Crawl payload must be a list of pages", source="pages", payload=payload)

    pages: List[CrawledPage] = []
    for i, raw in enumerate(raw_pages):
        try:
            pages.append(CrawledPagePayload.model_validate(raw).to_page())
        except ValidationError as e:
            logger.warning(f"Skipping malformed crawled page {i}: {e.error_count()} validation errors")

    logger.debug(f"Parsed {len(pages)} crawled pages")
    return pages
