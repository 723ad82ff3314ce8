"""
Unit tests for the Mapping proxy service.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from service_mapping.app.adapters import TomTomClient
from service_mapping.app.main import create_app


PNG = b"\x89PNG\r\n\x1a\nfake-map"


class RecordingUpstream:
    """MockTransport handler that records requests and answers per path."""

    def __init__(self):
        self.requests = []
        self.fail_with = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": "upstream said no"})
        if request.url.path.startswith("/map/"):
            return httpx.Response(200, content=PNG, headers={"Content-Type": "image/png"})
        return httpx.Response(200, json={"path": request.url.path})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def upstream():
    return RecordingUpstream()


@pytest.fixture
def client(upstream):
    app = create_app()
    service = app.state.mapping_service
    service.tomtom_client = TomTomClient(
        "https://api.tomtom.test",
        "server-key",
        transport=httpx.MockTransport(upstream),
    )
    return TestClient(app)


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["service"] == "mapping"


def test_geocode_forwards_query_and_injects_key(client, upstream):
    response = client.get("/geocode", params={"query": "Connaught Place, New Delhi", "limit": 2, "countrySet": "IN"})

    assert response.status_code == 200
    request = upstream.last
    assert request.url.raw_path.startswith(b"/search/2/geocode/Connaught%20Place%2C%20New%20Delhi.json")
    assert request.url.params["key"] == "server-key"
    assert request.url.params["limit"] == "2"
    assert request.url.params["countrySet"] == "IN"
    assert "language" not in request.url.params


def test_geocode_requires_query(client, upstream):
    response = client.get("/geocode")

    assert response.status_code == 422
    assert upstream.requests == []


def test_reverse_geocode(client, upstream):
    response = client.get("/reverseGeocode", params={"position": "28.61,77.23", "language": "en-GB"})

    assert response.status_code == 200
    assert upstream.last.url.path == "/search/2/reverseGeocode/28.61,77.23.json"
    assert upstream.last.url.params["language"] == "en-GB"


def test_reverse_geocode_position_cannot_inject_query_or_fragment(client, upstream):
    client.get("/reverseGeocode", params={"position": "28.61,77.23?key=mine#frag"})

    request = upstream.last
    assert request.url.raw_path.startswith(b"/search/2/reverseGeocode/28.61,77.23%3Fkey%3Dmine%23frag.json?")
    assert request.url.params.get_list("key") == ["server-key"]


def test_fuzzy_search(client, upstream):
    client.get("/fuzzySearch", params={"query": "chai", "limit": 3})

    assert upstream.last.url.path == "/search/2/search/chai.json"
    assert upstream.last.url.params["limit"] == "3"


def test_poi_search(client, upstream):
    client.get("/poiSearch", params={"query": "hospital", "lat": 28.61, "lon": 77.23, "radius": 1000})

    params = upstream.last.url.params
    assert upstream.last.url.path == "/search/2/poiSearch/hospital.json"
    assert params["lat"] == "28.61"
    assert params["lon"] == "77.23"
    assert params["radius"] == "1000"


def test_nearby_search(client, upstream):
    client.get("/nearbySearch", params={"lat": 28.61, "lon": 77.23})

    assert upstream.last.url.path == "/search/2/nearbySearch/.json"
    assert "radius" not in upstream.last.url.params


def test_calculate_route_defaults_to_json(client, upstream):
    client.get("/calculateRoute", params={"routePlanningLocations": "28.61,77.23:28.70,77.10"})

    assert upstream.last.url.path == "/routing/1/calculateRoute/28.61,77.23:28.70,77.10/json"


def test_reachable_range_passes_budget_params(client, upstream):
    client.get(
        "/reachableRange",
        params={"origin": "28.61,77.23", "contentType": "json", "timeBudgetInSec": 900},
    )

    request = upstream.last
    assert request.url.path == "/routing/1/calculateReachableRange/28.61,77.23/json"
    assert request.url.params["timeBudgetInSec"] == "900"
    assert "origin" not in request.url.params


@pytest.mark.parametrize(
    "origin, encoded",
    [
        ("../../../map/1/staticimage", b"..%2F..%2F..%2Fmap%2F1%2Fstaticimage"),
        ("..", b"%2E%2E"),
    ],
)
def test_reachable_range_origin_stays_inside_route(client, upstream, origin, encoded):
    client.get("/reachableRange", params={"origin": origin, "timeBudgetInSec": 900})

    assert upstream.last.url.raw_path.startswith(b"/routing/1/calculateReachableRange/" + encoded + b"/json?")


def test_content_type_must_be_a_known_format(client, upstream):
    response = client.get(
        "/calculateRoute",
        params={"routePlanningLocations": "28.61,77.23:28.70,77.10", "contentType": "json/../../x"},
    )

    assert response.status_code == 422
    assert upstream.requests == []


def test_traffic_incidents_forwards_all_params(client, upstream):
    client.get("/trafficIncidents", params={"bbox": "77.1,28.5,77.3,28.7", "fields": "{incidents{type}}"})

    request = upstream.last
    assert request.url.path == "/traffic/services/1/incidentDetails"
    assert request.url.params["bbox"] == "77.1,28.5,77.3,28.7"
    assert request.url.params["key"] == "server-key"


def test_static_map_returns_png(client, upstream):
    response = client.get("/staticMap", params={"center": "77.23,28.61", "zoom": 12})

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == PNG
    assert upstream.last.url.path == "/map/1/staticimage"


def test_upstream_failure_returns_500_with_message(client, upstream):
    upstream.fail_with = 403

    response = client.get("/geocode", params={"query": "Delhi"})

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "UPSTREAM_STATUS_ERROR"
    assert "403" in body["message"]


def test_proxy_metrics_are_recorded(client, upstream):
    client.get("/fuzzySearch", params={"query": "chai"})
    upstream.fail_with = 500
    client.get("/fuzzySearch", params={"query": "chai"})

    text = client.get("/metrics").text

    assert 'proxy_requests_total{operation="fuzzySearch",status="ok"} 1.0' in text
    assert 'proxy_requests_total{operation="fuzzySearch",status="error"} 1.0' in text
