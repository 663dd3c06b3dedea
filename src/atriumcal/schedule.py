from __future__ import annotations
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Sequence
from zoneinfo import ZoneInfo

from .models import NO_EVENTS, DayGroup, Event


def upcoming(events: Sequence[Event], now: datetime, days_ahead: int, max_items: int) -> List[Event]:
    """Events starting in [now, now + days_ahead), earliest first, at most max_items."""
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    # Window arithmetic in UTC so a DST change inside the window cannot shift its edge.
    start = now.astimezone(timezone.utc)
    until = start + timedelta(days=days_ahead)

    in_window = [e for e in events if e.start is not None and start <= e.start < until]
    # sorted() is stable: equal starts keep source order
    return sorted(in_window, key=lambda e: e.start)[: max(max_items, 0)]


def day_label(instant: datetime, tz: ZoneInfo) -> str:
    # Example: Thu, Jul 4
    return _label_for_day(instant.astimezone(tz).date())


def _label_for_day(day: date, with_year: bool = False) -> str:
    label = day.strftime("%a, %b %-d")
    return f"{label}, {day.year}" if with_year else label


def _fmt_time(instant: datetime, tz: ZoneInfo) -> str:
    return instant.astimezone(tz).strftime("%-I:%M %p").lower()


def group_by_day(events: Sequence[Event], tz_name: str) -> List[DayGroup]:
    """Bucket pre-sorted events under their display-zone calendar day.

    Groups come back ordered by their earliest start. When two days a year or
    more apart would share a label, both labels carry the year. An
    empty input gives the single NO_EVENTS group, never an empty list.
    """
    tz = ZoneInfo(tz_name)
    buckets: Dict[date, List[Event]] = {}
    for e in events:
        if e.start is None:
            continue
        buckets.setdefault(e.start.astimezone(tz).date(), []).append(e)

    if not buckets:
        return [NO_EVENTS]

    ordered = sorted(buckets.items(), key=lambda item: min(e.start for e in item[1]))
    short_labels = Counter(_label_for_day(day) for day, _ in ordered)
    return [
        DayGroup(label=_label_for_day(day, with_year=short_labels[_label_for_day(day)] > 1), events=tuple(items))
        for day, items in ordered
    ]


def format_when(event: Event, tz_name: str) -> str:
    if event.all_day:
        return "All day"
    if event.start is None:
        return ""

    tz = ZoneInfo(tz_name)
    if event.end is None:
        return _fmt_time(event.start, tz)
    if event.start.astimezone(tz).date() == event.end.astimezone(tz).date():
        return f"{_fmt_time(event.start, tz)}–{_fmt_time(event.end, tz)}"
    return (
        f"{day_label(event.start, tz)} {_fmt_time(event.start, tz)} → "
        f"{day_label(event.end, tz)} {_fmt_time(event.end, tz)}"
    )
