"""
Mapping proxy service for the City Data Gateway.
"""

from typing import Any, Dict, Optional

from fastapi import Query, Request, Response

from shared.base_service import BaseService
from shared.errors import ExternalServiceError
from service_mapping.app.adapters import TomTomClient, encode_segment


# Coordinate lists ("lat,lon:lat,lon") keep their separators in the path
COORDINATE_SAFE = ",:"
CONTENT_TYPE_PATTERN = "^(json|jsonp|xml)$"


class MappingService(BaseService):
    """REST proxy in front of the TomTom APIs."""

    def __init__(self):
        super().__init__("mapping", 4000)
        self.tomtom_client = TomTomClient(self.config.tomtom_base_url, self.config.tomtom_api_key)

        @self.app.on_event("startup")
        async def _startup():
            self.logger.info(
                "server_started",
                message="TomTom backend running",
                host=self.config.host,
                port=self.config.port,
            )

        self._setup_mapping_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.mapping_service = self

    async def _proxy_json(self, operation: str, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            data = await self.tomtom_client.get_json(path, params)
        except ExternalServiceError:
            self.metrics.increment_counter("proxy_requests_total", operation=operation, status="error")
            raise
        self.metrics.increment_counter("proxy_requests_total", operation=operation, status="ok")
        return data

    async def _proxy_image(self, operation: str, path: str, params: Optional[Dict[str, Any]] = None) -> Response:
        try:
            content = await self.tomtom_client.get_image(path, params)
        except ExternalServiceError:
            self.metrics.increment_counter("proxy_requests_total", operation=operation, status="error")
            raise
        self.metrics.increment_counter("proxy_requests_total", operation=operation, status="ok")
        return Response(content=content, media_type="image/png")

    def _setup_mapping_routes(self):
        """Set up one route per TomTom operation."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": self.service_name,
                "message": "City Data Gateway - TomTom backend",
                "version": "1.0.0"
            }

        @self.app.get("/geocode")
        async def geocode(
            query: str = Query(...),
            limit: Optional[int] = Query(None),
            country_set: Optional[str] = Query(None, alias="countrySet"),
            language: Optional[str] = Query(None),
        ):
            return await self._proxy_json(
                "geocode",
                f"/search/2/geocode/{encode_segment(query)}.json",
                {"limit": limit, "countrySet": country_set, "language": language},
            )

        @self.app.get("/reverseGeocode")
        async def reverse_geocode(
            position: str = Query(..., description="lat,lon"),
            language: Optional[str] = Query(None),
        ):
            return await self._proxy_json(
                "reverseGeocode",
                f"/search/2/reverseGeocode/{encode_segment(position, COORDINATE_SAFE)}.json",
                {"language": language},
            )

        @self.app.get("/fuzzySearch")
        async def fuzzy_search(
            query: str = Query(...),
            limit: Optional[int] = Query(None),
            language: Optional[str] = Query(None),
        ):
            return await self._proxy_json(
                "fuzzySearch",
                f"/search/2/search/{encode_segment(query)}.json",
                {"limit": limit, "language": language},
            )

        @self.app.get("/poiSearch")
        async def poi_search(
            query: str = Query(...),
            limit: Optional[int] = Query(None),
            lat: Optional[float] = Query(None),
            lon: Optional[float] = Query(None),
            radius: Optional[int] = Query(None),
        ):
            return await self._proxy_json(
                "poiSearch",
                f"/search/2/poiSearch/{encode_segment(query)}.json",
                {"limit": limit, "lat": lat, "lon": lon, "radius": radius},
            )

        @self.app.get("/nearbySearch")
        async def nearby_search(
            lat: float = Query(...),
            lon: float = Query(...),
            radius: Optional[int] = Query(None),
            limit: Optional[int] = Query(None),
        ):
            return await self._proxy_json(
                "nearbySearch",
                "/search/2/nearbySearch/.json",
                {"lat": lat, "lon": lon, "radius": radius, "limit": limit},
            )

        @self.app.get("/calculateRoute")
        async def calculate_route(
            route_planning_locations: str = Query(..., alias="routePlanningLocations"),
            content_type: str = Query("json", alias="contentType", pattern=CONTENT_TYPE_PATTERN),
            language: Optional[str] = Query(None),
        ):
            return await self._proxy_json(
                "calculateRoute",
                f"/routing/1/calculateRoute/{encode_segment(route_planning_locations, COORDINATE_SAFE)}/{content_type}",
                {"language": language},
            )

        @self.app.get("/reachableRange")
        async def reachable_range(
            request: Request,
            origin: str = Query(...),
            content_type: str = Query("json", alias="contentType", pattern=CONTENT_TYPE_PATTERN),
        ):
            # Budget parameters (timeBudgetInSec, fuelBudgetInLiters, ...) pass through untouched
            params = {
                name: value
                for name, value in request.query_params.items()
                if name not in ("origin", "contentType")
            }
            return await self._proxy_json(
                "reachableRange",
                f"/routing/1/calculateReachableRange/{encode_segment(origin, COORDINATE_SAFE)}/{content_type}",
                params,
            )

        @self.app.get("/trafficIncidents")
        async def traffic_incidents(request: Request):
            return await self._proxy_json(
                "trafficIncidents",
                "/traffic/services/1/incidentDetails",
                dict(request.query_params),
            )

        @self.app.get("/staticMap")
        async def static_map(request: Request):
            return await self._proxy_image(
                "staticMap",
                "/map/1/staticimage",
                dict(request.query_params),
            )


def create_app():
    """Create FastAPI application."""
    service = MappingService()
    return service.app


def main():
    service = MappingService()
    service.run()


if __name__ == "__main__":
    main()
