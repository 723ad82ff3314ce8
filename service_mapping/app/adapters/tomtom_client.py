"""
TomTom client for the mapping proxy.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from shared.errors import UpstreamPayloadError, UpstreamStatusError, UpstreamUnavailableError
from shared.logging import get_logger


def encode_segment(value: str, safe: str = "!~*'()") -> str:
    """Percent-encode one path segment.

    Slashes, query and fragment delimiters are always escaped, and a bare
    ``.`` or ``..`` is escaped too so it cannot climb out of the route.
    """
    encoded = quote(value, safe=safe)
    if encoded in (".", ".."):
        encoded = encoded.replace(".", "%2E")
    return encoded


class TomTomClient:
    """Forwards GET requests to TomTom with the API key injected server-side."""

    service_name = "tomtom"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self.logger = get_logger("mapping.tomtom_client")

    def build_url(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Upstream URL for ``path`` with the key first and unset params dropped."""
        query: Dict[str, Any] = {"key": self.api_key}
        for name, value in (params or {}).items():
            if value is not None and name != "key":
                query[name] = value
        return str(httpx.URL(f"{self.base_url}{path}", params=query))

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Proxy a JSON endpoint and return the decoded body."""
        response = await self._get(path, params)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamPayloadError(
                self.service_name,
                "Response body is not JSON",
                details={"path": path},
            ) from exc

    async def get_image(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        """Proxy an image endpoint and return the raw bytes."""
        response = await self._get(path, params)
        return response.content

    async def _get(self, path: str, params: Optional[Dict[str, Any]]) -> httpx.Response:
        url = self.build_url(path, params)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            self.logger.error("TomTom request failed", path=path, error=str(exc) or exc.__class__.__name__)
            raise UpstreamUnavailableError(
                self.service_name,
                str(exc) or exc.__class__.__name__,
                details={"path": path},
            ) from exc

        if not response.is_success:
            self.logger.error(
                "TomTom returned error status",
                path=path,
                status_code=response.status_code,
                response=response.text[:500],
            )
            raise UpstreamStatusError(self.service_name, response.status_code, details={"path": path})

        self.logger.debug("TomTom request succeeded", path=path)
        return response
