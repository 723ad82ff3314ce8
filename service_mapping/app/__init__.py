"""
Mapping Service package for the City Data Gateway.

Thin request-forwarding routes for the mapping provider (geocoding, search,
routing, traffic, static maps). The API key stays server-side.

Structure:
- app.main: FastAPI app and proxy routes.
- app.adapters: TomTom HTTP client.
"""
