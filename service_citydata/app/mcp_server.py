"""
MCP resource server for city data (FastMCP, stdio transport).

Exposes every city data lookup as a templated JSON resource:

    weather://{city}
    sensor://{lat},{lon}
    socioeconomic://{city}
    city-data://{city}
    city-data://{city}/{lat},{lon}

plus an ``add`` tool. The protocol runs over stdout, so logs go to stderr.
"""

import json
import sys
from typing import Any, Dict
from urllib.parse import unquote

from fastmcp import FastMCP

from shared.config import get_config
from shared.errors import ValidationError
from shared.logging import configure_logging, get_logger
from service_citydata.app.city_data import CityDataService
from service_citydata.app.domain import Coordinates
from service_citydata.app.main import build_city_data_service


SERVER_NAME = "city-data-server"


def parse_coordinates(lat: str, lon: str) -> Coordinates:
    """Coordinates from URI template segments."""
    try:
        return Coordinates(lat=float(lat), lon=float(lon))
    except ValueError as exc:
        raise ValidationError(
            f"Invalid coordinates: {lat},{lon}",
            details={"lat": lat, "lon": lon, "error": str(exc)},
        ) from exc


def _to_json(document: Dict[str, Any]) -> str:
    return json.dumps(document, allow_nan=False)


def create_mcp_server(city_data: CityDataService) -> FastMCP:
    """Build the MCP server around an already wired city data service."""
    mcp = FastMCP(SERVER_NAME)
    logger = get_logger("citydata.mcp")

    @mcp.tool()
    def add(a: float, b: float) -> float:
        """Add two numbers."""
        return a + b

    @mcp.resource(
        "weather://{city}",
        name="weather",
        description="Weather info for a city",
        mime_type="application/json",
    )
    async def weather_resource(city: str) -> str:
        city = unquote(city)
        logger.info("Resource read", resource="weather", city=city)
        result = await city_data.get_weather(city)
        return _to_json(result.to_dict())

    @mcp.resource(
        "sensor://{lat},{lon}",
        name="sensor",
        description="Sensor readings by coordinates",
        mime_type="application/json",
    )
    async def sensor_resource(lat: str, lon: str) -> str:
        coords = parse_coordinates(lat, lon)
        logger.info("Resource read", resource="sensor", lat=coords.lat, lon=coords.lon)
        result = await city_data.get_sensor(coords)
        return _to_json(result.to_dict())

    @mcp.resource(
        "socioeconomic://{city}",
        name="socioeconomic",
        description="Socioeconomic data for a city",
        mime_type="application/json",
    )
    async def socioeconomic_resource(city: str) -> str:
        city = unquote(city)
        logger.info("Resource read", resource="socioeconomic", city=city)
        result = await city_data.get_socioeconomic(city)
        return _to_json(result.to_dict())

    @mcp.resource(
        "city-data://{city}",
        name="city-data",
        description="Weather + Sensor + Socioeconomic for a city (no coordinates)",
        mime_type="application/json",
    )
    async def city_data_resource(city: str) -> str:
        city = unquote(city)
        logger.info("Resource read", resource="city-data", city=city)
        return _to_json(await city_data.get_city_data(city))

    @mcp.resource(
        "city-data://{city}/{lat},{lon}",
        name="city-data-at",
        description="Weather + Sensor + Socioeconomic for a city at coordinates",
        mime_type="application/json",
    )
    async def city_data_at_resource(city: str, lat: str, lon: str) -> str:
        city = unquote(city)
        coords = parse_coordinates(lat, lon)
        logger.info("Resource read", resource="city-data", city=city, lat=coords.lat, lon=coords.lon)
        return _to_json(await city_data.get_city_data(city, coords))

    return mcp


def main():
    config = get_config("citydata", 3000)
    configure_logging("citydata", config.log_level, stream=sys.stderr)
    mcp = create_mcp_server(build_city_data_service(config))
    get_logger("citydata.mcp").info("server_started", message="Standalone MCP Server running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
