import json
import math
from typing import AsyncIterator, List, Optional

import httpx
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from airbuddy.cities import CITIES
from airbuddy.config import Settings, get_settings
from airbuddy.crud import (
    fetch_air_quality,
    fetch_forecast_series,
    fetch_map,
    fetch_point,
    geocode,
)
from airbuddy.errors import AirBuddyError, MissingParameter
from airbuddy.helper import (
    chart_datapoints,
    get_aqi_info,
    linear_trend,
    log,
    pollutant_display_name,
)
from airbuddy.schemas import (
    AQICategoryResponse,
    AQIForecastData,
    DashboardResponse,
    EnvCheck,
    ForecastChart,
    ForecastSeries,
    GeocodeResult,
    Location,
    StationReading,
)

app = FastAPI(title="AirBuddy API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        yield client


@app.exception_handler(AirBuddyError)
async def airbuddy_error_handler(request: Request, exc: AirBuddyError):
    log.error(f"{request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(str(err["loc"][-1]) for err in exc.errors())
    return JSONResponse(status_code=400, content={"error": f"Invalid value for: {fields}"})


def require_coords(lat: Optional[float], lon: Optional[float]):
    if lat is None or lon is None:
        raise MissingParameter("Latitude and longitude are required")
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise MissingParameter("Latitude or longitude out of range")


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Server is running"


@app.get("/api/aqi", response_model=AQIForecastData)
async def get_aqi(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    require_coords(lat, lon)
    return await fetch_air_quality(client, settings, lat, lon)


@app.get("/api/aqi/forecast", response_model=ForecastSeries)
async def get_aqi_forecast(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    require_coords(lat, lon)
    return await fetch_forecast_series(client, settings, lat, lon)


@app.get("/api/aqi/map", response_model=List[StationReading])
async def get_aqi_map(
    bounds: Optional[str] = None,
    zoom: Optional[int] = None,
    locations: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    points = []
    if locations:
        try:
            points = json.loads(locations)
        except ValueError:
            raise MissingParameter("Locations must be a JSON array") from None
        if not isinstance(points, list):
            raise MissingParameter("Locations must be a JSON array")
    log.info(f"🗺️ Map query bounds={bounds} zoom={zoom} custom={len(points)}")
    return await fetch_map(client, settings, bounds, points)


@app.get("/api/aqi/point", response_model=StationReading)
async def get_aqi_point(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    require_coords(lat, lon)
    return await fetch_point(client, settings, lat, lon)


@app.get("/api/aqi/category", response_model=AQICategoryResponse)
def get_aqi_category(aqi: Optional[float] = None):
    if aqi is None:
        raise MissingParameter("AQI value is required")
    if not math.isfinite(aqi):
        raise MissingParameter("AQI value must be a finite number")
    return AQICategoryResponse(aqi=aqi, **get_aqi_info(aqi).model_dump())


@app.get("/api/geocode", response_model=GeocodeResult)
async def get_geocode(
    location: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    if not location or not location.strip():
        raise MissingParameter("Location is required")
    return await geocode(client, settings, location.strip())


@app.get("/api/cities", response_model=List[Location])
def get_cities():
    return CITIES


@app.get("/api/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    location: Optional[str] = None,
    pollutant: str = "pm2_5",
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Everything the forecast page shows for one place: current conditions,
    their AQI band, and a chart of ``pollutant`` with its trend line.
    Without ``location`` the configured default location is used.
    """
    query = (location or "").strip() or settings.default_location
    place = await geocode(client, settings, query)
    data = await fetch_air_quality(client, settings, place.lat, place.lon)

    chart = None
    if data.forecast:
        datapoints = chart_datapoints(data.forecast, pollutant)
        chart = ForecastChart(
            pollutant=pollutant,
            label=pollutant_display_name(pollutant),
            labels=[day.day for day in data.forecast],
            datapoints=datapoints,
            trend=linear_trend(datapoints),
        )

    return DashboardResponse(
        query=query,
        display_name=place.display_name,
        data=data,
        band=get_aqi_info(data.current.aqi),
        chart=chart,
    )


@app.get("/api/env-check", response_model=EnvCheck)
def env_check(settings: Settings = Depends(get_settings)):
    def state(value):
        return "loaded" if value else "not loaded"

    return EnvCheck(
        status="Environment check",
        environment=settings.environment,
        variables={
            "aqi_api_key": state(settings.aqi_api_key),
            "locationiq_api_key": state(settings.locationiq_api_key),
        },
    )


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
