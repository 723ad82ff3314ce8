"""
Unit tests for the fallback fetcher.
"""

from unittest.mock import AsyncMock

import pytest

from service_citydata.app.caching import FallbackCache
from service_citydata.app.fetching import FallbackFetcher, FetchOutcome
from shared.errors import UpstreamStatusError, UpstreamUnavailableError
from shared.metrics import MetricsCollector


DEFAULT_WEATHER = {"weatherTemperature": 0.0, "weatherRainfall": 0.0, "wind": 0.0, "timestamp": "now"}


def _default():
    return dict(DEFAULT_WEATHER)


class TestFallbackFetcher:
    """Test cases for FallbackFetcher."""

    @pytest.fixture
    def clock(self):
        class _Clock:
            now = 0.0

            def __call__(self):
                return self.now

        return _Clock()

    @pytest.fixture
    def cache(self, clock):
        return FallbackCache(ttl_seconds=900, max_entries=10, clock=clock)

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("citydata")

    @pytest.fixture
    def fetcher(self, cache, metrics):
        return FallbackFetcher(cache, metrics=metrics)

    @pytest.fixture
    def payload(self):
        return {"weatherTemperature": 26.85, "weatherRainfall": 0.0, "wind": 3.6, "timestamp": "t1"}

    @pytest.mark.asyncio
    async def test_success_returns_fresh_and_stores(self, fetcher, cache, payload):
        upstream = AsyncMock(return_value=payload)

        result = await fetcher.fetch("weather", "weather_Delhi", upstream, _default)

        assert result.outcome is FetchOutcome.FRESH
        assert result.cached is False
        assert result.payload == payload
        assert result.error is None
        assert cache.get("weather_Delhi") == payload
        upstream.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_with_prior_entry_returns_stale(self, fetcher, payload):
        await fetcher.fetch("weather", "weather_Delhi", AsyncMock(return_value=payload), _default)

        failing = AsyncMock(side_effect=UpstreamStatusError("weather", 503))
        result = await fetcher.fetch("weather", "weather_Delhi", failing, _default)

        assert result.outcome is FetchOutcome.STALE
        assert result.cached is True
        assert result.payload == payload
        assert "503" in result.error

    @pytest.mark.asyncio
    async def test_results_do_not_share_state_with_cache(self, fetcher, cache, payload):
        fresh = await fetcher.fetch("weather", "weather_Delhi", AsyncMock(return_value=dict(payload)), _default)
        fresh.payload["wind"] = 99.0

        failing = AsyncMock(side_effect=UpstreamUnavailableError("weather"))
        stale = await fetcher.fetch("weather", "weather_Delhi", failing, _default)
        stale.payload["weatherTemperature"] = -1.0

        assert cache.get("weather_Delhi") == payload
        again = await fetcher.fetch("weather", "weather_Delhi", failing, _default)
        assert again.payload == payload

    @pytest.mark.asyncio
    async def test_failure_without_entry_returns_default(self, fetcher, cache):
        failing = AsyncMock(side_effect=UpstreamUnavailableError("weather", "timed out"))

        result = await fetcher.fetch("weather", "weather_Delhi", failing, _default)

        assert result.outcome is FetchOutcome.DEFAULT
        assert result.cached is True
        assert result.payload == DEFAULT_WEATHER
        # Defaults are never cached
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_expired_entry_is_not_served(self, fetcher, clock, payload):
        await fetcher.fetch("weather", "weather_Delhi", AsyncMock(return_value=payload), _default)
        clock.now += 901

        failing = AsyncMock(side_effect=UpstreamUnavailableError("weather"))
        result = await fetcher.fetch("weather", "weather_Delhi", failing, _default)

        assert result.outcome is FetchOutcome.DEFAULT
        assert result.payload == DEFAULT_WEATHER

    @pytest.mark.asyncio
    async def test_keys_are_isolated(self, fetcher, payload):
        await fetcher.fetch("weather", "weather_Delhi", AsyncMock(return_value=payload), _default)

        failing = AsyncMock(side_effect=UpstreamUnavailableError("weather"))
        result = await fetcher.fetch("weather", "weather_Mumbai", failing, _default)

        assert result.outcome is FetchOutcome.DEFAULT

    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self, fetcher):
        broken = AsyncMock(side_effect=RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await fetcher.fetch("weather", "weather_Delhi", broken, _default)

    @pytest.mark.asyncio
    async def test_to_dict_adds_cached_flag(self, fetcher, payload):
        fresh = await fetcher.fetch("weather", "weather_Delhi", AsyncMock(return_value=payload), _default)
        stale = await fetcher.fetch(
            "weather", "weather_Delhi", AsyncMock(side_effect=UpstreamUnavailableError("weather")), _default
        )

        assert fresh.to_dict() == {**payload, "cached": False}
        assert stale.to_dict() == {**payload, "cached": True}

    @pytest.mark.asyncio
    async def test_outcomes_are_counted(self, fetcher, metrics, payload):
        failing = AsyncMock(side_effect=UpstreamUnavailableError("weather"))
        await fetcher.fetch("weather", "weather_Delhi", failing, _default)
        await fetcher.fetch("weather", "weather_Delhi", AsyncMock(return_value=payload), _default)
        await fetcher.fetch("weather", "weather_Delhi", failing, _default)

        registry = metrics.registry
        for outcome in ("fresh", "stale", "default"):
            assert registry.get_sample_value(
                "upstream_fetch_total", {"domain": "weather", "outcome": outcome}
            ) == 1.0
