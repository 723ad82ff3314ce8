"""
Fetching package: the single-attempt, cache-fallback policy shared by every
upstream domain.
"""

from .fetcher import FallbackFetcher, FetchOutcome, FetchResult

__all__ = ["FallbackFetcher", "FetchOutcome", "FetchResult"]
