"""
In-memory fallback cache for upstream payloads.
"""

import threading
import time
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

from cachetools import TTLCache

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TTL_SECONDS = 15 * 60
DEFAULT_MAX_ENTRIES = 500


class _CountingTTLCache(TTLCache):
    """TTLCache that reports every size-driven eviction."""

    def __init__(self, maxsize: int, ttl: float, timer: Callable[[], float], on_evict: Callable[[Any], None]):
        super().__init__(maxsize=maxsize, ttl=ttl, timer=timer)
        self._on_evict = on_evict

    def popitem(self):
        key, value = super().popitem()
        self._on_evict(key)
        return key, value


class FallbackCache:
    """Bounded LRU cache with a fixed time-to-live.

    Entries older than the TTL are treated as absent. When the cache is full
    the least recently used entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        *,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional["MetricsCollector"] = None,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.metrics = metrics
        self.logger = get_logger("citydata.cache")
        self._store = _CountingTTLCache(
            maxsize=max_entries,
            ttl=ttl_seconds,
            timer=clock,
            on_evict=self._evicted,
        )
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @staticmethod
    def make_key(prefix: str, *args: Any) -> str:
        """Build a cache key such as ``weather_Delhi``."""
        return "_".join([prefix] + [str(arg) for arg in args])

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the live entry for ``key`` or None."""
        cache_type = key.split("_", 1)[0]
        with self._lock:
            try:
                value = self._store[key]
            except KeyError:
                self._store.expire()
                self._misses += 1
                self._record("cache_misses_total", cache_type)
                return None

            self._hits += 1
            self._record("cache_hits_total", cache_type)
            return value

    def set(self, key: str, value: Dict[str, Any]) -> None:
        """Store ``value`` under ``key``, evicting the LRU entry when full."""
        with self._lock:
            self._store[key] = value
            size = self._live_size()

        if self.metrics:
            self.metrics.set_gauge("cache_entries", size)

    def __len__(self) -> int:
        with self._lock:
            return self._live_size()

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            return {
                "entries": self._live_size(),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _live_size(self) -> int:
        self._store.expire()
        return len(self._store)

    def _evicted(self, key: Any) -> None:
        # Called from inside set() with the lock held
        self._evictions += 1
        self.logger.debug("Cache entry evicted", key=key)

    def _record(self, metric_name: str, cache_type: str) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, cache_type=cache_type)
