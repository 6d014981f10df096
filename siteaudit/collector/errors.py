"""Errors raised at the ingestion boundary."""

from typing import Any, Optional


class SerpDataError(Exception):
    """Upstream keyword, SERP or crawl payload is structurally unusable."""

    def __init__(self, message: str, source: Optional[str] = None, payload: Any = None):
        super().__init__(message)
        self.source = source
        self.payload = payload
