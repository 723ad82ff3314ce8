"""
Weather-by-city client (OpenWeatherMap current conditions).
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

import httpx

from service_citydata.app.adapters.upstream_client import UpstreamClient
from service_citydata.app.domain.models import KELVIN_OFFSET, WeatherReading, utc_now_iso


class WeatherClient(UpstreamClient):
    """Client for current weather by city name."""

    service_name = "weather"

    def __init__(
        self,
        weather_api_url: str,
        api_key: str,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(weather_api_url, timeout=timeout, transport=transport)
        self.api_key = api_key

    async def get_weather(self, city: str) -> Dict[str, Any]:
        """Fetch current conditions for ``city`` as a weather payload."""
        data = await self._get_json({"q": city, "appid": self.api_key})

        try:
            rain = data.get("rain") or {}
            reading = WeatherReading(
                weather_temperature=float(data["main"]["temp"]) - KELVIN_OFFSET,
                weather_rainfall=float(rain.get("1h") or 0),
                wind=float(data["wind"]["speed"]),
                timestamp=utc_now_iso(),
            )
            measurements = (reading.weather_temperature, reading.weather_rainfall, reading.wind)
            if not all(math.isfinite(value) for value in measurements):
                raise ValueError(f"non-finite measurement in {measurements!r}")
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise self._payload_error(exc) from exc

        return reading.to_dict()
