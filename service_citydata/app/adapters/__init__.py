"""
Adapters package for the City Data service.

Contains HTTP client wrappers for the third-party data sources. These
adapters encapsulate:

- Base URLs and request shapes
- Reshaping raw responses into domain payloads
- Translating every failure into shared upstream errors

Adapters make exactly one attempt per call; fallback lives in the fetcher.
"""

from .upstream_client import UpstreamClient
from .weather_client import WeatherClient
from .sensor_client import SensorClient
from .socioeconomic_client import SocioeconomicClient

__all__ = [
    "UpstreamClient",
    "WeatherClient",
    "SensorClient",
    "SocioeconomicClient",
]
