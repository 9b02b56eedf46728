import httpx
import pytest
from fastapi.testclient import TestClient

from airbuddy.config import Settings, get_settings
from airbuddy.main import app, get_http_client

WAQI = "https://waqi.test"
LOCATIONIQ = "https://locationiq.test/v1"

KOCHI = (9.9312, 76.2673)


class FakeUpstream:
    """Routes keyed by URL path; unknown paths answer 404."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, path, payload=None, status_code=200, raises=None):
        self.routes[path] = (status_code, payload, raises)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"status": "error", "data": "Unknown station"})
        status_code, payload, raises = route
        if raises is not None:
            raise raises("simulated failure", request=request)
        return httpx.Response(status_code, json=payload)


def feed_payload(aqi=42, iaqi=None, dominentpol="pm25", city="Kochi", iso="2025-04-01T10:00:00+05:30", daily=None):
    data = {
        "aqi": aqi,
        "idx": 8185,
        "dominentpol": dominentpol,
        "iaqi": iaqi if iaqi is not None else {"pm25": {"v": 42}, "pm10": {"v": 18}, "o3": {"v": 7.5}},
        "time": {"s": "2025-04-01 10:00:00", "tz": "+05:30", "iso": iso},
        "city": {"name": city, "geo": [9.93, 76.26]},
    }
    if daily is not None:
        data["forecast"] = {"daily": daily}
    return {"status": "ok", "data": data}


def daily_payload():
    return {
        "pm25": [
            {"avg": 40, "day": "2025-04-02", "max": 60, "min": 20},
            {"avg": 45, "day": "2025-04-01", "max": 70, "min": 25},
            {"avg": 50, "day": "2025-04-03", "max": 80, "min": 30},
        ],
        "pm10": [
            {"avg": 20, "day": "2025-04-01", "max": 90, "min": 10},
            {"avg": 22, "day": "2025-04-02", "max": 30, "min": 12},
        ],
        "o3": [
            {"avg": 5, "day": "2025-04-03", "max": 9, "min": 1},
        ],
    }


def feed_path(lat, lon):
    return f"/feed/geo:{lat};{lon}/"


def forecast_path(lat, lon):
    return f"/forecast/geo:{lat};{lon}/"


@pytest.fixture
def settings():
    return Settings(
        aqi_api_key="waqi-token",
        locationiq_api_key="liq-token",
        waqi_base_url=WAQI,
        locationiq_base_url=LOCATIONIQ,
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def client(settings, upstream):
    async def fake_http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as c:
            yield c

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_client] = fake_http_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
