from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as dateutil_parser

from .models import PropertyValue

logger = logging.getLogger(__name__)

# Fills fields the fallback parser cannot find in the text, so results never
# depend on the day the build runs.
_FALLBACK_DEFAULT = datetime(2000, 1, 1)


class DateForm(Enum):
    DATE_ONLY = "date"
    UTC_DATE_TIME = "utc"
    LOCAL_DATE_TIME = "local"
    UNRECOGNIZED = "unrecognized"


_PATTERNS = (
    (DateForm.DATE_ONLY, re.compile(r"^(\d{4})(\d{2})(\d{2})$")),
    (DateForm.UTC_DATE_TIME, re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})Z$")),
    (DateForm.LOCAL_DATE_TIME, re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})$")),
)


@dataclass(frozen=True)
class ClassifiedValue:
    form: DateForm
    raw: str
    fields: Tuple[int, ...] = ()    # year, month, day[, hour, minute, second]


def classify(value: str) -> ClassifiedValue:
    text = value.strip()
    for form, pattern in _PATTERNS:
        m = pattern.match(text)
        if m:
            return ClassifiedValue(form=form, raw=text, fields=tuple(int(g) for g in m.groups()))
    return ClassifiedValue(form=DateForm.UNRECOGNIZED, raw=text)


def _zone(name: str) -> Optional[ZoneInfo]:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def tz_offset_at(instant: datetime, zone: ZoneInfo) -> timedelta:
    """UTC offset of ``zone`` at ``instant``.

    The instant is rendered through the zone's rules and the resulting local
    wall clock is read back as if it were UTC; the difference is the offset
    in force at that moment, DST included.
    """
    local = instant.astimezone(zone)
    as_if_utc = local.replace(tzinfo=timezone.utc)
    return as_if_utc - instant


def wall_clock_to_utc(wall: datetime, zone: ZoneInfo) -> datetime:
    """Convert a naive wall-clock time in ``zone`` to an aware UTC datetime.

    The first offset is taken at the wall clock read as UTC, which can sit on
    the wrong side of a DST change; the second is taken at the instant that
    first estimate produced.
    """
    guess = wall.replace(tzinfo=timezone.utc)
    first = guess - tz_offset_at(guess, zone)
    return guess - tz_offset_at(first, zone)


def _effective_zone(prop: PropertyValue, default_tz: str) -> Optional[ZoneInfo]:
    tzid = prop.params.get("TZID")
    if tzid:
        zone = _zone(tzid)
        if zone is not None:
            return zone
        logger.warning("Unknown TZID %r; falling back to %s", tzid, default_tz)
    zone = _zone(default_tz)
    if zone is None:
        logger.warning("Unknown default timezone %r", default_tz)
    return zone


def _resolve_fallback(raw: str, prop: PropertyValue, default_tz: str) -> Optional[datetime]:
    try:
        parsed = dateutil_parser.parse(raw, default=_FALLBACK_DEFAULT)
    except (ValueError, OverflowError):
        logger.debug("Unparseable date value %r", raw)
        return None
    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)
    zone = _effective_zone(prop, default_tz)
    if zone is None:
        return None
    return wall_clock_to_utc(parsed, zone)


def resolve_instant(prop: Optional[PropertyValue], default_tz: str) -> Optional[datetime]:
    """Resolve a DTSTART/DTEND property to an aware UTC datetime.

    Returns None instead of raising when the value cannot be interpreted.
    Date-only values resolve to local midnight; local date-times use the
    property's TZID, or ``default_tz`` when it is absent or unknown.
    """
    if prop is None or not prop.value.strip():
        return None

    classified = classify(prop.value)
    try:
        if classified.form is DateForm.UTC_DATE_TIME:
            return datetime(*classified.fields, tzinfo=timezone.utc)

        if classified.form is DateForm.DATE_ONLY or classified.form is DateForm.LOCAL_DATE_TIME:
            zone = _effective_zone(prop, default_tz)
            if zone is None:
                return None
            return wall_clock_to_utc(datetime(*classified.fields), zone)

        if classified.form is DateForm.UNRECOGNIZED:
            return _resolve_fallback(classified.raw, prop, default_tz)
    except (ValueError, OverflowError):
        # e.g. 20240230 or a wall clock too close to datetime.min/max
        logger.debug("Invalid date value %r", prop.value)
        return None

    raise AssertionError(f"unhandled date form: {classified.form}")


def is_date_only(prop: Optional[PropertyValue]) -> bool:
    if prop is None:
        return False
    if prop.params.get("VALUE", "").upper() == "DATE":
        return True
    return classify(prop.value).form is DateForm.DATE_ONLY
