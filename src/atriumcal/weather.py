from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import requests

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"


@dataclass(frozen=True)
class DailyForecast:
    day: date
    icon: str
    high_f: int
    low_f: int


@dataclass(frozen=True)
class Forecast:
    temperature_f: int
    icon: str
    condition: str
    days: Tuple[DailyForecast, ...] = ()


_LABELS = {
    0: "Clear", 1: "Mostly Sunny", 2: "Partly Cloudy", 3: "Cloudy",
    45: "Fog", 48: "Freezing Fog",
    51: "Light Drizzle", 53: "Drizzle", 55: "Heavy Drizzle",
    61: "Light Rain", 63: "Rain", 65: "Heavy Rain", 66: "Freezing Rain", 67: "Freezing Rain",
    71: "Light Snow", 73: "Snow", 75: "Heavy Snow", 77: "Snow Grains",
    80: "Rain Showers", 81: "Rain Showers", 82: "Heavy Showers",
    85: "Snow Showers", 86: "Snow Showers",
    95: "Thunderstorms", 96: "T’storms", 99: "T’storms",
}


def _weather_icon(weather_code: int) -> str:
    # WMO weather codes from Open-Meteo.
    if weather_code == 0:
        return "☀️"
    if weather_code in {1, 2}:
        return "⛅"
    if weather_code == 3:
        return "☁️"
    if weather_code in {45, 48}:
        return "🌫️"
    if weather_code in {51, 53, 55}:
        return "🌦️"
    if weather_code in {61, 63, 65, 80, 81, 82}:
        return "🌧️"
    if weather_code in {66, 67}:
        return "🌧️❄️"
    if weather_code in {71, 73, 75, 77}:
        return "❄️"
    if weather_code in {85, 86}:
        return "🌨️"
    if weather_code in {95, 96, 99}:
        return "⛈️"
    return "🌡️"


def _weather_label(weather_code: int) -> str:
    return _LABELS.get(weather_code, "—")


def parse_forecast(payload: Dict[str, Any]) -> Optional[Forecast]:
    current = payload.get("current_weather") or {}
    if "temperature" not in current or "weathercode" not in current:
        return None

    daily = payload.get("daily") or {}
    times = daily.get("time", [])
    codes = daily.get("weathercode", [])
    highs = daily.get("temperature_2m_max", [])
    lows = daily.get("temperature_2m_min", [])

    days: List[DailyForecast] = []
    if times and len(times) == len(codes) == len(highs) == len(lows):
        for t, code, hi, lo in zip(times, codes, highs, lows):
            days.append(DailyForecast(
                day=date.fromisoformat(t),
                icon=_weather_icon(int(code)),
                high_f=int(round(float(hi))),
                low_f=int(round(float(lo))),
            ))

    code = int(current["weathercode"])
    return Forecast(
        temperature_f=int(round(float(current["temperature"]))),
        icon=_weather_icon(code),
        condition=_weather_label(code),
        days=tuple(days),
    )


class WeatherForecastResolver:
    """Current conditions plus a daily outlook for one location."""

    def __init__(self, latitude: float, longitude: float, user_agent: str = "atriumcal/1.0") -> None:
        self.latitude = latitude
        self.longitude = longitude
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    def daily_forecast(self, days: int = 7) -> Optional[Forecast]:
        resp = self._session.get(
            FORECAST_URL,
            params={
                "latitude": self.latitude,
                "longitude": self.longitude,
                "current_weather": "true",
                "daily": "weathercode,temperature_2m_max,temperature_2m_min",
                "temperature_unit": "fahrenheit",
                "wind_speed_unit": "mph",
                "timezone": "auto",
                "forecast_days": days,
            },
            timeout=6,
        )
        resp.raise_for_status()
        return parse_forecast(resp.json())
