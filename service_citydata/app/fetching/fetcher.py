"""
Fallback-caching fetcher.

Runs a single upstream attempt and, when it fails, answers from the fallback
cache or from the domain default. Callers always get a FetchResult.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TYPE_CHECKING

from shared.errors import ExternalServiceError
from shared.logging import get_logger

from service_citydata.app.caching import FallbackCache

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


UpstreamCall = Callable[[], Awaitable[Dict[str, Any]]]
DefaultFactory = Callable[[], Dict[str, Any]]


class FetchOutcome(str, Enum):
    """How a FetchResult was produced."""

    FRESH = "fresh"        # Upstream answered
    STALE = "stale"        # Upstream failed, last good payload served
    DEFAULT = "default"    # Upstream failed, nothing cached


@dataclass(frozen=True)
class FetchResult:
    """Payload for one domain plus where it came from."""

    domain: str
    payload: Dict[str, Any]
    outcome: FetchOutcome
    error: Optional[str] = None

    @property
    def cached(self) -> bool:
        return self.outcome is not FetchOutcome.FRESH

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as the published document: payload fields plus ``cached``."""
        return {**self.payload, "cached": self.cached}


class FallbackFetcher:
    """Wraps unreliable upstream calls with a stale-or-default fallback."""

    def __init__(self, cache: FallbackCache, *, metrics: Optional["MetricsCollector"] = None):
        self.cache = cache
        self.metrics = metrics
        self.logger = get_logger("citydata.fetcher")

    async def fetch(
        self,
        domain: str,
        key: str,
        upstream_call: UpstreamCall,
        default: DefaultFactory,
    ) -> FetchResult:
        """Fetch ``key`` through ``upstream_call``, falling back on failure."""
        error: Optional[ExternalServiceError] = None
        try:
            payload = await upstream_call()
        except ExternalServiceError as exc:
            error = exc

        if error is not None:
            return self.fallback(domain, key, default, error)

        self.cache.set(key, dict(payload))
        self._record(domain, FetchOutcome.FRESH)
        self.logger.debug("Upstream fetch succeeded", domain=domain, key=key)
        return FetchResult(domain=domain, payload=payload, outcome=FetchOutcome.FRESH)

    def fallback(
        self,
        domain: str,
        key: str,
        default: DefaultFactory,
        error: ExternalServiceError,
    ) -> FetchResult:
        """Resolve a failed fetch to the cached payload or the domain default."""
        cached = self.cache.get(key)
        if cached is not None:
            outcome = FetchOutcome.STALE
            payload = dict(cached)
        else:
            outcome = FetchOutcome.DEFAULT
            payload = default()

        self.logger.warning(
            "Upstream fetch failed, serving fallback",
            domain=domain,
            key=key,
            outcome=outcome.value,
            code=error.code,
            error=error.message,
        )
        self._record(domain, outcome)
        return FetchResult(domain=domain, payload=payload, outcome=outcome, error=error.message)

    def _record(self, domain: str, outcome: FetchOutcome) -> None:
        if self.metrics:
            self.metrics.increment_counter("upstream_fetch_total", domain=domain, outcome=outcome.value)
