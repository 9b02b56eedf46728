"""
Pure transforms from WAQI payloads to the AirBuddy response shapes.

Nothing here performs I/O; the same upstream input always gives the same output.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional

from airbuddy.schemas import (
    Components,
    CurrentAirQuality,
    ForecastDay,
    ForecastSeries,
    POLLUTANT_KEYS,
    Location,
    PollutionData,
    StationReading,
    WaqiFeed,
    WaqiForecastEntry,
    WaqiMapStation,
)

# upstream iaqi / forecast code -> AirBuddy component key
COMPONENT_MAPPING = {
    "pm25": "pm2_5",
    "pm10": "pm10",
    "o3": "o3",
    "no2": "no2",
    "so2": "so2",
}

DEFAULT_MAIN_POLLUTANT = "pm25"
DEFAULT_FORECAST_POLLUTANT = "pm2_5"
FORECAST_SERIES_LENGTH = 5


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _timestamp(feed: WaqiFeed) -> str:
    if feed.time and feed.time.iso:
        return feed.time.iso
    return _now_iso()


def build_components(feed: WaqiFeed) -> Components:
    """Fixed pollutant keys; anything the station does not report is 0."""
    values = {}
    for code, reading in feed.iaqi.items():
        key = COMPONENT_MAPPING.get(code, code)
        if key in POLLUTANT_KEYS:
            values[key] = reading.v
    return Components(**values)


def build_current(feed: WaqiFeed) -> CurrentAirQuality:
    return CurrentAirQuality(
        aqi=feed.aqi,
        mainPollutant=feed.dominentpol or DEFAULT_MAIN_POLLUTANT,
        components=build_components(feed),
        timestamp=_timestamp(feed),
    )


def build_location(feed: WaqiFeed, lat: float, lon: float) -> Location:
    name = feed.city.name if feed.city and feed.city.name else "Unknown"
    return Location(lat=lat, lon=lon, name=name)


def _first_entry(entries: List[WaqiForecastEntry], day: str) -> Optional[WaqiForecastEntry]:
    for entry in entries:
        if entry.day == day:
            return entry
    return None


def build_forecast_days(daily: Dict[str, List[WaqiForecastEntry]]) -> List[ForecastDay]:
    """
    Group per-pollutant daily series into one record per day.

    Days are unique and ascending. A pollutant with no entry on a day is left
    out of that day's components. The main pollutant is the one with the
    largest ``max``; on a tie the first pollutant in upstream key order keeps it.
    """
    days = set()
    for entries in daily.values():
        days.update(entry.day for entry in entries)

    result = []
    for day in sorted(days):
        components: Dict[str, float] = {}
        max_aqi = 0.0
        main_pollutant = ""

        for pollutant, entries in daily.items():
            entry = _first_entry(entries, day)
            if entry is None:
                continue
            key = COMPONENT_MAPPING.get(pollutant, pollutant)
            for stat in ("avg", "min", "max"):
                value = getattr(entry, stat)
                if value is not None:
                    components[f"{key}_{stat}"] = value

            if entry.max is not None and entry.max > max_aqi:
                max_aqi = entry.max
                main_pollutant = key

        aqi = (
            max_aqi
            or components.get(f"{DEFAULT_FORECAST_POLLUTANT}_max")
            or components.get(f"{DEFAULT_FORECAST_POLLUTANT}_avg")
            or 0
        )
        result.append(ForecastDay(
            day=day,
            aqi=aqi,
            mainPollutant=main_pollutant or DEFAULT_FORECAST_POLLUTANT,
            components=components,
        ))
    return result


def build_forecast_series(feed: WaqiFeed, limit: int = FORECAST_SERIES_LENGTH) -> ForecastSeries:
    daily = feed.forecast.daily if feed.forecast else {}
    return ForecastSeries(
        location=feed.city.name if feed.city and feed.city.name else "Unknown",
        forecast={pollutant: entries[:limit] for pollutant, entries in daily.items()},
    )


def station_from_feed(feed: WaqiFeed, lat: float, lon: float, name: Optional[str] = None) -> StationReading:
    location = build_location(feed, lat, lon)
    if name:
        location.name = name
    return StationReading(
        location=location,
        pollution=PollutionData(
            aqius=feed.aqi,
            mainus=feed.dominentpol or DEFAULT_MAIN_POLLUTANT,
            timestamp=_timestamp(feed),
        ),
    )


def stations_from_map(stations: List[WaqiMapStation]) -> List[StationReading]:
    """Viewport stations; offline ones (no numeric AQI) are skipped."""
    readings = []
    for station in stations:
        if station.aqi is None:
            continue
        info = station.station
        readings.append(StationReading(
            location=Location(
                lat=station.lat,
                lon=station.lon,
                name=info.name if info and info.name else "Unknown",
            ),
            pollution=PollutionData(
                aqius=station.aqi,
                mainus=DEFAULT_MAIN_POLLUTANT,
                timestamp=(info.time if info and info.time else None) or _now_iso(),
            ),
        ))
    return readings
