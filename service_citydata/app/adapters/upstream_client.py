"""
Base HTTP client for third-party data sources.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from shared.errors import UpstreamPayloadError, UpstreamStatusError, UpstreamUnavailableError
from shared.logging import get_logger


class UpstreamClient:
    """Single-attempt JSON GET against one upstream endpoint.

    Every failure is raised as an ``ExternalServiceError`` subclass:
    transport problems and timeouts as ``UpstreamUnavailableError``,
    non-2xx answers as ``UpstreamStatusError`` and undecodable bodies as
    ``UpstreamPayloadError``.
    """

    service_name = "upstream"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.logger = get_logger(f"citydata.{self.service_name}_client")

    async def _get_json(self, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as exc:
            self.logger.error(
                "Upstream request failed",
                url=self.base_url,
                error=str(exc) or exc.__class__.__name__,
            )
            raise UpstreamUnavailableError(
                self.service_name,
                str(exc) or exc.__class__.__name__,
                details={"url": self.base_url},
            ) from exc

        if not response.is_success:
            self.logger.error(
                "Upstream returned error status",
                url=self.base_url,
                status_code=response.status_code,
            )
            raise UpstreamStatusError(self.service_name, response.status_code, details={"url": self.base_url})

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamPayloadError(
                self.service_name,
                "Response body is not JSON",
                details={"url": self.base_url},
            ) from exc

    def _payload_error(self, exc: Exception) -> UpstreamPayloadError:
        return UpstreamPayloadError(
            self.service_name,
            f"Unexpected response shape: {exc!r}",
            details={"url": self.base_url},
        )
