"""
City data REST service for the City Data Gateway.
"""

from typing import Any, Dict, Optional

from fastapi import Query

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.metrics import MetricsCollector
from service_citydata.app.adapters import SensorClient, SocioeconomicClient, WeatherClient
from service_citydata.app.caching import FallbackCache
from service_citydata.app.city_data import CityDataService
from service_citydata.app.domain import Coordinates
from service_citydata.app.fetching import FallbackFetcher


def build_city_data_service(config: ServiceConfig, metrics: Optional[MetricsCollector] = None) -> CityDataService:
    """Wire the cache, fetcher and upstream adapters from configuration."""
    cache = FallbackCache(
        ttl_seconds=config.cache_ttl_seconds,
        max_entries=config.cache_max_entries,
        metrics=metrics,
    )
    timeout = config.upstream_timeout_seconds
    return CityDataService(
        fetcher=FallbackFetcher(cache, metrics=metrics),
        weather_client=WeatherClient(config.weather_api_url, config.weather_api_key, timeout=timeout),
        sensor_client=SensorClient(config.sensor_api_url, timeout=timeout),
        socioeconomic_client=SocioeconomicClient(config.socioeconomic_api_url, timeout=timeout),
    )


class CityDataGatewayService(BaseService):
    """REST face over the city data fetchers."""

    def __init__(self):
        super().__init__("citydata", 3000)
        self.city_data = build_city_data_service(self.config, self.metrics)

        @self.app.on_event("startup")
        async def _startup():
            self.logger.info(
                "server_started",
                message="City data REST server running",
                host=self.config.host,
                port=self.config.port,
            )

        self._setup_city_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.citydata_service = self

    def _setup_city_routes(self):
        """Set up city data routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "event": "server_started",
                "message": "City data REST server running",
                "service": self.service_name,
                "version": "1.0.0"
            }

        @self.app.get("/city/{city}")
        async def get_city(
            city: str,
            lat: Optional[float] = Query(None, ge=-90.0, le=90.0),
            lon: Optional[float] = Query(None, ge=-180.0, le=180.0),
        ) -> Dict[str, Any]:
            """Weather, sensor and socioeconomic data for a city."""
            coords = Coordinates.from_optional(lat, lon)
            return await self.city_data.get_city_data(city, coords)

        @self.app.get("/weather/{city}")
        async def get_weather(city: str) -> Dict[str, Any]:
            result = await self.city_data.get_weather(city)
            return result.to_dict()

        @self.app.get("/sensor")
        async def get_sensor(
            lat: float = Query(..., ge=-90.0, le=90.0),
            lon: float = Query(..., ge=-180.0, le=180.0),
        ) -> Dict[str, Any]:
            result = await self.city_data.get_sensor(Coordinates(lat=lat, lon=lon))
            return result.to_dict()

        @self.app.get("/socioeconomic/{city}")
        async def get_socioeconomic(city: str) -> Dict[str, Any]:
            result = await self.city_data.get_socioeconomic(city)
            return result.to_dict()

        @self.app.get("/cache/stats")
        async def cache_stats() -> Dict[str, Any]:
            """Fallback cache statistics."""
            return self.city_data.cache.stats()

    async def _check_dependencies(self) -> Dict[str, str]:
        """Upstreams are fronted by the fallback cache, so only report its state."""
        return {"fallback_cache": "ok"}


def create_app():
    """Create FastAPI application."""
    service = CityDataGatewayService()
    return service.app


def main():
    service = CityDataGatewayService()
    service.run()


if __name__ == "__main__":
    main()
