"""
Socioeconomic indicators client (WHO Global Health Observatory).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from service_citydata.app.adapters.upstream_client import UpstreamClient
from service_citydata.app.domain.models import (
    DEFAULT_POPULATION_DENSITY,
    SocioeconomicSnapshot,
    utc_now_iso,
)


class SocioeconomicClient(UpstreamClient):
    """Client for health statistics used as socioeconomic indicators.

    The indicator endpoint is global, not per city: the first record is used
    for every city and population density is a fixed figure.
    """

    service_name = "socioeconomic"

    def __init__(
        self,
        socioeconomic_api_url: str,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(socioeconomic_api_url, timeout=timeout, transport=transport)

    async def get_snapshot(self, city: str) -> Dict[str, Any]:
        """Fetch the indicator snapshot reported for ``city``."""
        data = await self._get_json()

        try:
            records = data["value"]
            first = records[0] if records else {}
            snapshot = SocioeconomicSnapshot(
                population_density=DEFAULT_POPULATION_DENSITY,
                malaria_cases=first.get("Value") or 0,
                timestamp=utc_now_iso(),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise self._payload_error(exc) from exc

        self.logger.debug("Socioeconomic snapshot retrieved", city=city)
        return snapshot.to_dict()
