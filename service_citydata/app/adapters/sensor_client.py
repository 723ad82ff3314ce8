"""
Environmental sensor client (openSenseMap boxes inside a bounding box).
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

import httpx

from service_citydata.app.adapters.upstream_client import UpstreamClient
from service_citydata.app.domain.models import Coordinates, SensorReading, utc_now_iso


BBOX_HALF_SIZE = 0.01
AIR_QUALITY_TITLE = "PM2.5"
TEMPERATURE_TITLE = "Temperature"


def bounding_box(coords: Coordinates, half_size: float = BBOX_HALF_SIZE) -> str:
    """``west,south,east,north`` around a coordinate."""
    return ",".join(
        str(value)
        for value in (
            coords.lon - half_size,
            coords.lat - half_size,
            coords.lon + half_size,
            coords.lat + half_size,
        )
    )


def _last_measurement(sensors: List[Dict[str, Any]], title_fragment: str) -> float:
    """Last finite value of the first sensor whose title contains ``title_fragment``, else 0."""
    for sensor in sensors:
        if title_fragment in (sensor.get("title") or ""):
            value = (sensor.get("lastMeasurement") or {}).get("value")
            try:
                number = float(value) if value else 0.0
            except (TypeError, ValueError):
                return 0.0
            return number if math.isfinite(number) else 0.0
    return 0.0


class SensorClient(UpstreamClient):
    """Client for sensor stations around a coordinate."""

    service_name = "sensor"

    def __init__(
        self,
        sensor_api_url: str,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(sensor_api_url, timeout=timeout, transport=transport)

    async def get_sensor_readings(self, coords: Coordinates) -> Dict[str, Any]:
        """Read PM2.5 and temperature from the first station near ``coords``."""
        data = await self._get_json({"bbox": bounding_box(coords)})

        try:
            if not isinstance(data, list):
                raise TypeError(f"expected a list of boxes, got {type(data).__name__}")
            sensors = (data[0].get("sensors") or []) if data else []
            reading = SensorReading(
                sensor_air_quality=_last_measurement(sensors, AIR_QUALITY_TITLE),
                sensor_temperature=_last_measurement(sensors, TEMPERATURE_TITLE),
                timestamp=utc_now_iso(),
            )
        except (TypeError, AttributeError) as exc:
            raise self._payload_error(exc) from exc

        return reading.to_dict()
