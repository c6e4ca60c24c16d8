"""
Fetcher module for Entity Intelligence.

Provides page retrieval for URL-sourced analysis.
"""

from entity_intel.fetcher.page_fetcher import PageFetcher, validate_url

__all__ = [
    "PageFetcher",
    "validate_url",
]
