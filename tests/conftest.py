# tests/conftest.py
import httpx
import pytest

from wms_grading.schemas.common import GeoCoordinate
from wms_grading.schemas.sampling import RequestPolicy
from wms_grading.utils import time as clock

ENDPOINT = "https://wms.example.org/geoserver/wms"
LAYER = "risk:flood_depth"
AMSTERDAM = GeoCoordinate(lat=52.3676, lon=4.9041)


def coordinate_of(request: httpx.Request) -> GeoCoordinate:
    """Center of the BBOX sent in a GetFeatureInfo request."""
    west, south, east, north = (float(x) for x in request.url.params["BBOX"].split(","))
    return GeoCoordinate(lat=(south + north) / 2, lon=(west + east) / 2)


def feature_response(properties=None, features=True) -> httpx.Response:
    if not features:
        return httpx.Response(200, json={"type": "FeatureCollection", "features": []})
    return httpx.Response(200, json={"type": "FeatureCollection", "features": [{"properties": properties}]})


@pytest.fixture(autouse=True)
def pauses(monkeypatch):
    """Replaces the backoff/batch sleep with a recorder; no test really sleeps."""
    recorded = []

    async def fake_pause(ms):
        recorded.append(ms)

    monkeypatch.setattr(clock, "pause", fake_pause)
    return recorded


@pytest.fixture
def policy():
    return RequestPolicy(max_retries=3, retry_delay_ms=1000, concurrent_requests=5, batch_delay_ms=200, timeout_s=5)


@pytest.fixture
def client_for():
    """Builds an AsyncClient whose requests go to `handler` instead of the network."""
    def make(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return make
