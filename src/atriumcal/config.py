from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import yaml

@dataclass
class ScheduleConfig:
    timezone: str
    days_ahead: int
    max_items: int

@dataclass
class WeatherConfig:
    enabled: bool
    latitude: float
    longitude: float
    place: str

@dataclass
class AppConfig:
    brand: str
    connect_url: str
    qr_text: str
    output_path: str
    schedule: ScheduleConfig
    weather: WeatherConfig

def _check_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone in config: {name!r}") from e
    return name

def load_config(path: str) -> AppConfig:
    p = Path(path)
    data: Dict[str, Any] = {}
    if p.exists():
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    schedule = data.get("schedule", {})
    weather = data.get("weather", {})

    return AppConfig(
        brand=str(data.get("brand", "Welcome to Versailles UMC")),
        connect_url=str(data.get("connect_url", "https://vumc.versaillesumc.org")),
        qr_text=str(data.get("qr_text", "Scan to open VUMC Connect")),
        output_path=str(data.get("output_path", "index.html")),
        schedule=ScheduleConfig(
            timezone=_check_timezone(str(schedule.get("timezone", "America/New_York"))),
            days_ahead=int(schedule.get("days_ahead", 45)),
            max_items=int(schedule.get("max_items", 30)),
        ),
        weather=WeatherConfig(
            enabled=bool(weather.get("enabled", True)),
            latitude=float(weather.get("latitude", 38.052)),
            longitude=float(weather.get("longitude", -84.729)),
            place=str(weather.get("place", "Versailles, KY")),
        ),
    )
