import asyncio
from typing import Any, List, Optional, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from airbuddy.config import Settings
from airbuddy.errors import (
    AirBuddyError,
    MissingParameter,
    NetworkUnreachable,
    NotFound,
    ServiceError,
    ServiceMisconfigured,
    UpstreamError,
    UpstreamUnavailable,
)
from airbuddy.helper import log
from airbuddy.reshape import (
    build_current,
    build_forecast_days,
    build_forecast_series,
    build_location,
    station_from_feed,
    stations_from_map,
)
from airbuddy.schemas import (
    AQIForecastData,
    ForecastSeries,
    GeocodeResult,
    Location,
    LocationIQPlace,
    StationReading,
    WaqiEnvelope,
    WaqiFeed,
    WaqiMapStation,
)

_map_stations = TypeAdapter(List[WaqiMapStation])
_places = TypeAdapter(List[LocationIQPlace])


def _require_aqi_key(settings: Settings) -> str:
    if not settings.aqi_api_key:
        raise ServiceMisconfigured("API key not configured")
    return settings.aqi_api_key


async def _get_json(client: httpx.AsyncClient, url: str, params: dict) -> Any:
    """GET ``url`` and decode JSON, mapping transport failures onto AirBuddy errors."""
    try:
        r = await client.get(url, params=params)
        r.raise_for_status()
        return r.json()
    except httpx.HTTPStatusError as e:
        log.error(f"❌ Upstream {url} answered {e.response.status_code}")
        raise UpstreamError(f"Upstream service returned {e.response.status_code}") from e
    except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as e:
        log.error(f"❌ Upstream {url} unreachable: {e}")
        raise NetworkUnreachable("Upstream service unreachable") from e
    except httpx.HTTPError as e:
        log.error(f"❌ Upstream {url} failed: {e}")
        raise UpstreamError("Upstream request failed") from e
    except ValueError as e:
        raise UpstreamError("Upstream returned invalid JSON") from e


async def _waqi(client: httpx.AsyncClient, settings: Settings, path: str, params: dict = None,
                failure: str = "Unable to fetch AQI data") -> Any:
    """Call a WAQI endpoint and return the envelope's ``data`` once status is ok."""
    token = _require_aqi_key(settings)
    url = f"{settings.waqi_base_url}/{path}"
    log.info(f"🌍 WAQI {path}")
    payload = await _get_json(client, url, {**(params or {}), "token": token})
    try:
        envelope = WaqiEnvelope.model_validate(payload)
    except ValidationError as e:
        raise UpstreamError("Unexpected response from AQI provider") from e
    if envelope.status != "ok":
        log.warning(f"⚠️ WAQI {path} status={envelope.status}: {envelope.data}")
        raise UpstreamUnavailable(failure)
    return envelope.data


def _parse_feed(data: Any) -> WaqiFeed:
    try:
        return WaqiFeed.model_validate(data)
    except ValidationError as e:
        raise UpstreamError("Unexpected response from AQI provider") from e


async def fetch_feed(client: httpx.AsyncClient, settings: Settings, lat: float, lon: float) -> WaqiFeed:
    data = await _waqi(client, settings, f"feed/geo:{lat};{lon}/")
    feed = _parse_feed(data)
    if feed.aqi is None:
        raise UpstreamUnavailable("No AQI reading for this location")
    return feed


async def fetch_forecast_feed(client: httpx.AsyncClient, settings: Settings, lat: float, lon: float) -> WaqiFeed:
    data = await _waqi(client, settings, f"forecast/geo:{lat};{lon}/",
                       failure="Unable to fetch forecast data")
    return _parse_feed(data)


async def fetch_air_quality(client: httpx.AsyncClient, settings: Settings, lat: float, lon: float) -> AQIForecastData:
    """Current conditions plus the day-grouped forecast for one coordinate."""
    current = await fetch_feed(client, settings, lat, lon)
    forecast = await fetch_forecast_feed(client, settings, lat, lon)
    daily = forecast.forecast.daily if forecast.forecast else {}
    return AQIForecastData(
        location=build_location(current, lat, lon),
        current=build_current(current),
        forecast=build_forecast_days(daily),
    )


async def fetch_forecast_series(client: httpx.AsyncClient, settings: Settings, lat: float, lon: float) -> ForecastSeries:
    feed = await fetch_forecast_feed(client, settings, lat, lon)
    return build_forecast_series(feed)


async def fetch_point(client: httpx.AsyncClient, settings: Settings, lat: float, lon: float,
                      name: Optional[str] = None) -> StationReading:
    feed = await fetch_feed(client, settings, lat, lon)
    return station_from_feed(feed, lat, lon, name)


def parse_bounds(bounds: str) -> str:
    """Normalise ``lat1,lon1,lat2,lon2`` into the WAQI ``latlng`` parameter."""
    parts = [p.strip() for p in bounds.split(",")]
    if len(parts) != 4:
        raise MissingParameter("Bounds must be lat1,lon1,lat2,lon2")
    try:
        lat1, lon1, lat2, lon2 = (float(p) for p in parts)
    except ValueError:
        raise MissingParameter("Bounds must be numeric") from None
    return f"{lat1:.4f},{lon1:.4f},{lat2:.4f},{lon2:.4f}"


async def fetch_map_stations(client: httpx.AsyncClient, settings: Settings, bounds: str) -> List[StationReading]:
    latlng = parse_bounds(bounds)
    data = await _waqi(client, settings, "map/bounds/", {"latlng": latlng, "networks": "all"},
                       failure="Unable to fetch map data")
    try:
        stations = _map_stations.validate_python(data or [])
    except ValidationError as e:
        raise UpstreamError("Unexpected response from AQI provider") from e
    return stations_from_map(stations)


async def _custom_point(client: httpx.AsyncClient, settings: Settings, raw: Any) -> Optional[StationReading]:
    try:
        point = Location.model_validate(raw)
        return await fetch_point(client, settings, point.lat, point.lon, point.name)
    except ValidationError as e:
        log.warning(f"⚠️ Dropping custom location {raw!r}: {e.error_count()} validation error(s)")
    except AirBuddyError as e:
        log.warning(f"⚠️ Dropping custom location {raw!r}: {e.message}")
    return None


async def fetch_custom_points(client: httpx.AsyncClient, settings: Settings,
                              points: Sequence[Any]) -> List[StationReading]:
    """
    Look up every custom point concurrently and keep the ones that succeed.

    Each task captures its own failure, so the group always joins and the
    batch never fails because one point did.
    """
    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(_custom_point(client, settings, raw)) for raw in points]
    readings = [t.result() for t in tasks]
    kept = [r for r in readings if r is not None]
    log.info(f"✅ Custom locations: {len(kept)}/{len(points)} resolved")
    return kept


async def fetch_map(client: httpx.AsyncClient, settings: Settings, bounds: Optional[str],
                    points: Sequence[Any]) -> List[StationReading]:
    _require_aqi_key(settings)
    stations = await fetch_map_stations(client, settings, bounds) if bounds else []
    if points:
        stations.extend(await fetch_custom_points(client, settings, points))
    return stations


async def geocode(client: httpx.AsyncClient, settings: Settings, location: str) -> GeocodeResult:
    """First LocationIQ match for a free-text place name."""
    if not settings.locationiq_api_key:
        raise ServiceMisconfigured("Geocoding access token not configured")

    url = f"{settings.locationiq_base_url}/search.php"
    params = {"key": settings.locationiq_api_key, "q": location, "format": "json"}
    log.info(f"🔍 Geocoding {location!r}")
    try:
        r = await client.get(url, params=params)
        # LocationIQ answers 404 "Unable to geocode" when nothing matches
        if r.status_code == 404:
            raise NotFound("Location not found")
        r.raise_for_status()
        places = _places.validate_python(r.json())
    except (httpx.HTTPError, ValidationError, ValueError) as e:
        log.exception(f"❌ Geocoding failed for {location!r}: {e}")
        raise ServiceError("Failed to geocode location") from e

    if not places:
        raise NotFound("Location not found")
    first = places[0]
    return GeocodeResult(lat=first.lat, lon=first.lon, display_name=first.display_name)
