"""
City data service: per-domain lookups and the combined city document.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from shared.logging import get_logger

from service_citydata.app.adapters import SensorClient, SocioeconomicClient, WeatherClient
from service_citydata.app.caching import FallbackCache
from service_citydata.app.domain.models import (
    Coordinates,
    Domain,
    SensorReading,
    SocioeconomicSnapshot,
    WeatherReading,
    utc_now_iso,
)
from service_citydata.app.fetching import FallbackFetcher, FetchOutcome, FetchResult


class CityDataService:
    """Composes the upstream adapters behind one fallback fetcher.

    The fetcher (and through it the cache) is shared by every domain, so a
    weather payload cached by a combined lookup also backs a later
    single-domain lookup for the same city.
    """

    def __init__(
        self,
        fetcher: FallbackFetcher,
        weather_client: WeatherClient,
        sensor_client: SensorClient,
        socioeconomic_client: SocioeconomicClient,
    ) -> None:
        self.fetcher = fetcher
        self.weather_client = weather_client
        self.sensor_client = sensor_client
        self.socioeconomic_client = socioeconomic_client
        self.logger = get_logger("citydata.aggregation")

    @property
    def cache(self) -> FallbackCache:
        return self.fetcher.cache

    async def get_weather(self, city: str) -> FetchResult:
        return await self.fetcher.fetch(
            Domain.WEATHER.value,
            FallbackCache.make_key(Domain.WEATHER.value, city),
            lambda: self.weather_client.get_weather(city),
            lambda: WeatherReading.default().to_dict(),
        )

    async def get_socioeconomic(self, city: str) -> FetchResult:
        return await self.fetcher.fetch(
            Domain.SOCIOECONOMIC.value,
            FallbackCache.make_key(Domain.SOCIOECONOMIC.value, city),
            lambda: self.socioeconomic_client.get_snapshot(city),
            lambda: SocioeconomicSnapshot.default().to_dict(),
        )

    async def get_sensor(self, coords: Coordinates) -> FetchResult:
        return await self.fetcher.fetch(
            Domain.SENSOR.value,
            FallbackCache.make_key(Domain.SENSOR.value, *coords.cache_args()),
            lambda: self.sensor_client.get_sensor_readings(coords),
            lambda: SensorReading.default().to_dict(),
        )

    async def get_city_data(self, city: str, coords: Optional[Coordinates] = None) -> Dict[str, Any]:
        """Weather, sensor and socioeconomic data for a city in one document.

        The lookups run concurrently. Without coordinates the sensor upstream
        is not called and the default sensor payload is reported.
        """
        lookups = [self.get_weather(city), self.get_socioeconomic(city)]
        if coords is not None:
            lookups.append(self.get_sensor(coords))

        results = await asyncio.gather(*lookups)
        weather, socioeconomic = results[0], results[1]
        if coords is not None:
            sensor = results[2]
        else:
            sensor = FetchResult(
                domain=Domain.SENSOR.value,
                payload=SensorReading.default().to_dict(),
                outcome=FetchOutcome.DEFAULT,
            )

        self.logger.info(
            "City data assembled",
            city=city,
            weather=weather.outcome.value,
            socioeconomic=socioeconomic.outcome.value,
            sensor=sensor.outcome.value,
        )

        return {
            "city": city,
            "timestamp": utc_now_iso(),
            "weather": weather.to_dict(),
            "sensor": sensor.to_dict(),
            "socioeconomic": socioeconomic.to_dict(),
        }
