from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

UNTITLED = "Untitled"
NO_EVENTS_LABEL = "No events"


@dataclass(frozen=True)
class PropertyValue:
    value: str
    params: Dict[str, str] = field(default_factory=dict)  # upper-cased names


@dataclass(frozen=True)
class Event:
    title: str = UNTITLED
    start: Optional[datetime] = None    # UTC, None when unschedulable
    end: Optional[datetime] = None      # UTC
    all_day: bool = False
    location: str = ""
    description: str = ""


@dataclass(frozen=True)
class DayGroup:
    label: str
    events: Tuple[Event, ...] = ()

    @property
    def is_empty_sentinel(self) -> bool:
        return self.label == NO_EVENTS_LABEL and not self.events


NO_EVENTS = DayGroup(label=NO_EVENTS_LABEL)
