"""
Line-oriented iCalendar reader.

Only VEVENT components are read. Each event block is searched for the
properties the display needs; when a property repeats, the first occurrence
is authoritative and later ones are ignored (no multi-valued properties).
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, List, Optional, Pattern

from .instants import is_date_only, resolve_instant
from .models import UNTITLED, Event, PropertyValue

_FOLD_RE = re.compile(r"\n[ \t]")
_BEGIN_EVENT_RE = re.compile(r"^BEGIN:VEVENT[ \t]*$", re.M)
_END_EVENT_RE = re.compile(r"^END:VEVENT[ \t]*$", re.M)
# Nested components such as VALARM carry their own DESCRIPTION/SUMMARY.
_SUBCOMPONENT_RE = re.compile(r"^BEGIN:(?!VEVENT\b)([A-Z-]+)[ \t]*$.*?^END:\1[ \t]*$\n?", re.M | re.S)
_PARAM_RE = re.compile(r';([^=;:]+)=("[^"]*"|[^;:]*)')
_ESCAPE_RE = re.compile(r"\\([\\,;nN])")
_ESCAPES = {"\\": "\\", ",": ",", ";": ";", "n": "\n", "N": "\n"}


def unfold(text: Optional[str]) -> str:
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _FOLD_RE.sub("", text)


def split_blocks(text: str) -> List[str]:
    """Return one raw block per BEGIN:VEVENT marker, in source order.

    A block ends at its END:VEVENT line; an unterminated block runs to the
    next BEGIN:VEVENT or the end of the text.
    """
    starts = [m.start() for m in _BEGIN_EVENT_RE.finditer(text)]
    blocks: List[str] = []
    for start, stop in zip(starts, starts[1:] + [len(text)]):
        block = text[start:stop]
        end = _END_EVENT_RE.search(block)
        if end:
            block = block[: end.end()]
        blocks.append(_SUBCOMPONENT_RE.sub("", block))
    return blocks


@lru_cache(maxsize=None)
def _property_re(name: str) -> Pattern[str]:
    # quoted parameter values may contain ':' and ';'
    return re.compile(rf'^{re.escape(name)}((?:;(?:[^:;"\n]|"[^"\n]*")*)*):([^\n]*)$', re.M)


def _parse_params(raw: str) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for key, value in _PARAM_RE.findall(raw):
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        params[key.strip().upper()] = value.strip()
    return params


def get_property(block: str, name: str) -> Optional[PropertyValue]:
    m = _property_re(name).search(block)
    if not m:
        return None
    return PropertyValue(value=m.group(2).strip(), params=_parse_params(m.group(1)))


def get_text(block: str, name: str) -> str:
    m = _property_re(name).search(block)
    return m.group(2).strip() if m else ""


def unescape(text: Optional[str]) -> str:
    if not text:
        return ""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], text).strip()


def build_event(block: str, default_tz: str) -> Event:
    start_prop = get_property(block, "DTSTART")
    end_prop = get_property(block, "DTEND")
    return Event(
        title=unescape(get_text(block, "SUMMARY")) or UNTITLED,
        start=resolve_instant(start_prop, default_tz),
        end=resolve_instant(end_prop, default_tz),
        all_day=is_date_only(start_prop),
        location=unescape(get_text(block, "LOCATION")),
        description=unescape(get_text(block, "DESCRIPTION")),
    )


def parse_events(text: Optional[str], default_tz: str) -> List[Event]:
    return [build_event(block, default_tz) for block in split_blocks(unfold(text))]
