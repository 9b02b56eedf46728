import logging
from typing import Dict, List, Sequence

import numpy as np

from airbuddy.schemas import AQIBand, ForecastDay, TrendLine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("AIRBUDDY")

# === AQI bands (US EPA scale, inclusive upper bounds) ===
AQI_BANDS = [
    (50, AQIBand(
        category="Good",
        color="#00E400",
        colorClass="bg-green-500",
        textColor="text-black",
        advice="Air quality is satisfactory, and air pollution poses little or no risk.",
    )),
    (100, AQIBand(
        category="Moderate",
        color="#FFFF00",
        colorClass="bg-yellow-500",
        textColor="text-black",
        advice="Air quality is acceptable. However, there may be a risk for some people, "
               "particularly those who are unusually sensitive to air pollution.",
    )),
    (150, AQIBand(
        category="Unhealthy for Sensitive Groups",
        color="#FF7E00",
        colorClass="bg-orange-500",
        textColor="text-white",
        advice="Members of sensitive groups may experience health effects. "
               "The general public is less likely to be affected.",
    )),
    (200, AQIBand(
        category="Unhealthy",
        color="#FF0000",
        colorClass="bg-red-500",
        textColor="text-white",
        advice="Some members of the general public may experience health effects; "
               "members of sensitive groups may experience more serious health effects.",
    )),
    (300, AQIBand(
        category="Very Unhealthy",
        color="#8F3F97",
        colorClass="bg-purple-500",
        textColor="text-white",
        advice="Health alert: The risk of health effects is increased for everyone.",
    )),
]

HAZARDOUS = AQIBand(
    category="Hazardous",
    color="#7E0023",
    colorClass="bg-pink-800",
    textColor="text-white",
    advice="Health warning of emergency conditions: everyone is more likely to be affected.",
)

POLLUTANT_NAMES: Dict[str, str] = {
    "pm2_5": "PM2.5",
    "pm10": "PM10",
    "o3": "Ozone",
    "no2": "Nitrogen Dioxide",
    "so2": "Sulfur Dioxide",
    "co": "Carbon Monoxide",
}


def get_aqi_info(aqi: float) -> AQIBand:
    for upper, band in AQI_BANDS:
        if aqi <= upper:
            return band
    return HAZARDOUS


def pollutant_display_name(code: str) -> str:
    return POLLUTANT_NAMES.get(code, code)


def chart_datapoints(forecast: Sequence[ForecastDay], pollutant: str) -> List[float]:
    """One value per forecast day: the pollutant's average, else its max, else its min, else 0."""
    points = []
    for day in forecast:
        value = 0.0
        for stat in ("avg", "max", "min"):
            found = day.components.get(f"{pollutant}_{stat}")
            if found is not None:
                value = found
                break
        points.append(float(value))
    return points


def linear_trend(values: Sequence[float], extend: int = 2) -> TrendLine:
    """
    Least-squares line over x = 0..n-1, plus ``extend`` points past the end.

    Closed form, no error bounds. With fewer than two points the slope is 0
    and the line sits on the single value (or on 0 for an empty series).
    """
    y = np.asarray(values, dtype=float)
    n = len(y)
    if n == 0:
        return TrendLine(slope=0.0, intercept=0.0, fitted=[], predicted=[0.0] * extend)

    x = np.arange(n, dtype=float)
    if n < 2:
        slope = 0.0
        intercept = float(y[0])
    else:
        x_mean = x.mean()
        y_mean = y.mean()
        slope = float(np.sum((x - x_mean) * (y - y_mean)) / np.sum((x - x_mean) ** 2))
        intercept = float(y_mean - slope * x_mean)

    fitted = intercept + slope * x
    future = intercept + slope * np.arange(n, n + extend, dtype=float)
    return TrendLine(
        slope=slope,
        intercept=intercept,
        fitted=fitted.tolist(),
        predicted=future.tolist(),
    )
