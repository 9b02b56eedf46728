from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator

POLLUTANT_KEYS = ("co", "no", "no2", "o3", "so2", "pm2_5", "pm10", "nh3")


def _station_aqi(value):
    # WAQI reports "-" for stations that are currently offline
    if value is None or value == "-":
        return None
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            # left as-is so int validation rejects it
            return value
    return value


StationAqi = Annotated[Optional[int], BeforeValidator(_station_aqi)]


# === Upstream: WAQI ===

class WaqiEnvelope(BaseModel):
    status: str
    data: Any = None


class WaqiValue(BaseModel):
    v: float


class WaqiTime(BaseModel):
    iso: Optional[str] = None


class WaqiCity(BaseModel):
    name: Optional[str] = None


class WaqiForecastEntry(BaseModel):
    day: str
    avg: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None


class WaqiForecast(BaseModel):
    daily: Dict[str, List[WaqiForecastEntry]] = Field(default_factory=dict)


class WaqiFeed(BaseModel):
    aqi: StationAqi = None
    dominentpol: Optional[str] = None
    iaqi: Dict[str, WaqiValue] = Field(default_factory=dict)
    time: Optional[WaqiTime] = None
    city: Optional[WaqiCity] = None
    forecast: Optional[WaqiForecast] = None

    @field_validator("dominentpol", mode="before")
    @classmethod
    def blank_pollutant(cls, value):
        return value or None


class WaqiStationInfo(BaseModel):
    name: Optional[str] = None
    time: Optional[str] = None


class WaqiMapStation(BaseModel):
    lat: float
    lon: float
    uid: Optional[int] = None
    aqi: StationAqi = None
    station: Optional[WaqiStationInfo] = None


# === Upstream: LocationIQ ===

class LocationIQPlace(BaseModel):
    lat: float
    lon: float
    display_name: str


# === AirBuddy responses ===

class Location(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    name: str = "Unknown"


class Components(BaseModel):
    co: float = 0
    no: float = 0
    no2: float = 0
    o3: float = 0
    so2: float = 0
    pm2_5: float = 0
    pm10: float = 0
    nh3: float = 0


class CurrentAirQuality(BaseModel):
    aqi: int
    mainPollutant: str
    components: Components
    timestamp: str


class ForecastDay(BaseModel):
    day: str
    aqi: float
    mainPollutant: str
    components: Dict[str, float] = Field(default_factory=dict)


class AQIForecastData(BaseModel):
    location: Location
    current: CurrentAirQuality
    forecast: List[ForecastDay] = Field(default_factory=list)


class ForecastSeries(BaseModel):
    location: str
    forecast: Dict[str, List[WaqiForecastEntry]] = Field(default_factory=dict)


class PollutionData(BaseModel):
    aqius: int
    mainus: str
    timestamp: str


class StationReading(BaseModel):
    location: Location
    pollution: PollutionData


class GeocodeResult(BaseModel):
    lat: float
    lon: float
    display_name: str


class AQIBand(BaseModel):
    category: str
    color: str
    colorClass: str
    textColor: str
    advice: str


class AQICategoryResponse(AQIBand):
    aqi: float


class TrendLine(BaseModel):
    slope: float
    intercept: float
    fitted: List[float]
    predicted: List[float]


class ForecastChart(BaseModel):
    pollutant: str
    label: str
    labels: List[str]
    datapoints: List[float]
    trend: TrendLine


class DashboardResponse(BaseModel):
    query: str
    display_name: str
    data: AQIForecastData
    band: AQIBand
    chart: Optional[ForecastChart] = None


class EnvCheck(BaseModel):
    status: str
    environment: str
    variables: Dict[str, str]

