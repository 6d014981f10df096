"""
Site Audit Cannibalization Engine

Detects keyword cannibalization for local-business sites:
1. Classifies URLs, keyword intent and page-pair conflicts
2. Discovers served markets from the site's own location pages
3. Runs four detection tiers over ranking and crawl data
4. Produces JSON-ready reports with path-specific fixes
"""

__version__ = "0.1.0"
