"""
Domain payloads for the City Data service.
"""

from .models import (
    Coordinates,
    Domain,
    SensorReading,
    SocioeconomicSnapshot,
    WeatherReading,
)

__all__ = [
    "Coordinates",
    "Domain",
    "SensorReading",
    "SocioeconomicSnapshot",
    "WeatherReading",
]
