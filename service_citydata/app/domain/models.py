"""
Domain payloads served by the city data service.

Field names on the wire are the camelCase keys clients already consume;
the Python attributes are snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


KELVIN_OFFSET = 273.15
DEFAULT_POPULATION_DENSITY = 5000


class Domain(str, Enum):
    """Upstream data domains."""

    WEATHER = "weather"
    SENSOR = "sensor"
    SOCIOECONOMIC = "socioeconomic"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class WeatherReading:
    """Current conditions for a city."""

    weather_temperature: float
    weather_rainfall: float
    wind: float
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weatherTemperature": self.weather_temperature,
            "weatherRainfall": self.weather_rainfall,
            "wind": self.wind,
            "timestamp": self.timestamp,
        }

    @classmethod
    def default(cls) -> "WeatherReading":
        return cls(weather_temperature=0.0, weather_rainfall=0.0, wind=0.0, timestamp=utc_now_iso())


@dataclass(frozen=True)
class SensorReading:
    """Nearest sensor station measurements around a coordinate."""

    sensor_air_quality: float
    sensor_temperature: float
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sensorAirQuality": self.sensor_air_quality,
            "sensorTemperature": self.sensor_temperature,
            "timestamp": self.timestamp,
        }

    @classmethod
    def default(cls) -> "SensorReading":
        return cls(sensor_air_quality=0.0, sensor_temperature=0.0, timestamp=utc_now_iso())


@dataclass(frozen=True)
class SocioeconomicSnapshot:
    """Population and health indicators for a city."""

    population_density: int
    malaria_cases: Any
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "populationDensity": self.population_density,
            "malariaCases": self.malaria_cases,
            "timestamp": self.timestamp,
        }

    @classmethod
    def default(cls) -> "SocioeconomicSnapshot":
        return cls(population_density=DEFAULT_POPULATION_DENSITY, malaria_cases=0, timestamp=utc_now_iso())


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair."""

    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"longitude out of range: {self.lon}")

    @classmethod
    def from_optional(cls, lat: Optional[float], lon: Optional[float]) -> Optional["Coordinates"]:
        """Both values or nothing: a lone latitude or longitude is ignored."""
        if lat is None or lon is None:
            return None
        return cls(lat=float(lat), lon=float(lon))

    def cache_args(self) -> tuple:
        """Coordinates rounded to two decimals, the resolution of the sensor box."""
        # Adding 0.0 folds -0.0 into 0.0 so both sides of zero share a key
        return tuple(f"{round(value, 2) + 0.0:.2f}" for value in (self.lat, self.lon))
