"""Utility modules for the site audit cannibalization engine."""

from .config import Settings, get_settings
from .urls import (
    brand_from_domain,
    extract_domain,
    extract_path,
    normalize_domain,
    relative_path,
)

__all__ = [
    "Settings",
    "get_settings",
    # URL helpers
    "brand_from_domain",
    "extract_domain",
    "extract_path",
    "normalize_domain",
    "relative_path",
]
