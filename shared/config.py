"""
Shared configuration management for the City Data Gateway.
"""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CITYDATA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Upstream data sources
    weather_api_url: str = Field(default="https://api.openweathermap.org/data/2.5/weather")
    weather_api_key: str = Field(default="")
    sensor_api_url: str = Field(default="https://api.opensensemap.org/boxes")
    socioeconomic_api_url: str = Field(default="https://ghoapi.azureedge.net/api/MALARIA_EST_CASES")

    # Mapping provider
    tomtom_base_url: str = Field(default="https://api.tomtom.com")
    tomtom_api_key: str = Field(default="")

    # Upstream calls and fallback cache
    upstream_timeout_seconds: float = Field(default=5.0)
    cache_ttl_seconds: int = Field(default=900)
    cache_max_entries: int = Field(default=500)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service.

    ``PORT`` in the environment takes precedence over the service default.
    """
    return ServiceConfig(service_name=service_name, port=int(os.getenv("PORT", port)))
