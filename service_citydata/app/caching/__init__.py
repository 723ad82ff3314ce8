"""
City data caching package.

Holds the last good payload per upstream key so that failed upstream calls
can be answered with stale data. Entries are only written on success.
"""

from .fallback_cache import FallbackCache

__all__ = ["FallbackCache"]
