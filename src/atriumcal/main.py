from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import AppConfig, ScheduleConfig, load_config
from .ics import parse_events
from .models import DayGroup
from .render import render_page
from .schedule import group_by_day, upcoming
from .source import fetch_ics_text
from .weather import Forecast, WeatherForecastResolver

CONFIG_PATH_DEFAULT = "config.yaml"


def build_schedule(ics_text: str, cfg: ScheduleConfig, now: datetime) -> List[DayGroup]:
    """Parse, window and group one calendar export. Pure: same text and now, same groups."""
    events = parse_events(ics_text, cfg.timezone)
    window = upcoming(events, now, cfg.days_ahead, cfg.max_items)
    return group_by_day(window, cfg.timezone)


def _count_events(groups: List[DayGroup]) -> int:
    return sum(len(g.events) for g in groups)


def _load_ics_text(ics_file: Optional[str]) -> str:
    if ics_file:
        return Path(ics_file).read_text(encoding="utf-8")

    url = os.environ.get("ICS_URL", "").strip()
    if not url:
        raise RuntimeError(
            "Missing ICS_URL (set it in the environment or .env with your https://... .ics link)."
        )
    return fetch_ics_text(url)


def _fetch_forecast(cfg: AppConfig) -> Optional[Forecast]:
    if not cfg.weather.enabled:
        return None
    try:
        return WeatherForecastResolver(cfg.weather.latitude, cfg.weather.longitude).daily_forecast()
    except Exception as e:
        print(f"Weather fetch failed; continuing without forecast. Error: {e}")
        return None


def run_once(
    config_path: str = CONFIG_PATH_DEFAULT,
    ics_file: Optional[str] = None,
    output_path: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Path:
    load_dotenv()
    cfg = load_config(config_path)
    now = now or datetime.now(tz=timezone.utc)

    ics_text = _load_ics_text(ics_file)
    groups = build_schedule(ics_text, cfg.schedule, now)
    print(
        f"Scheduled {_count_events(groups)} events in {len(groups)} day groups; "
        f"window={cfg.schedule.days_ahead}d, max_items={cfg.schedule.max_items}"
    )

    forecast = _fetch_forecast(cfg)
    html = render_page(groups, cfg, now, forecast)

    out = Path(output_path or cfg.output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(html, encoding="utf-8")
    print(f"Wrote {out}")
    return out


def main():
    import argparse

    ap = argparse.ArgumentParser(description="Build the atrium display page from an ICS feed.")
    ap.add_argument("--config", default=CONFIG_PATH_DEFAULT)
    ap.add_argument("--ics-file", default=None, help="read a local .ics export instead of ICS_URL")
    ap.add_argument("--output", default=None, help="override output_path from the config")
    args = ap.parse_args()

    try:
        run_once(config_path=args.config, ics_file=args.ics_file, output_path=args.output)
    except (RuntimeError, OSError, ValueError) as e:
        print(f"Build failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
