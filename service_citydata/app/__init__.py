"""
City Data Service package for the City Data Gateway.

The service fronts three unreliable third-party sources (weather, sensor
stations, health statistics) and never fails a lookup because of them:
every upstream call is a single attempt whose failure is answered from the
fallback cache or a domain default.

Structure:
- app.main: FastAPI app and REST routes.
- app.mcp_server: FastMCP resource server over the same lookups.
- app.adapters: HTTP clients for the upstream sources.
- app.caching: In-memory TTL/LRU fallback cache.
- app.fetching: Fetch-with-fallback policy and result type.
- app.city_data: Per-domain lookups and the combined city document.
- app.domain: Payload types.
"""
