"""
Central data model definitions used across the project.

Every calendar item, whatever its origin, is one of the Event variants below.
The variant class itself is the source tag (see SourceType), so that:
- the merge engine can dedupe per source
- only manual assignments carry a priority and a completion flag
- study blocks always point back to the assignment they prepare for
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import ClassVar, Dict, Optional, Union


UNTITLED = "Untitled Event"
DATE_FORMAT = "%Y-%m-%d"


class SourceType(str, Enum):
    MANUAL_ASSIGNMENT = "ManualAssignment"
    FEED_ASSIGNMENT = "FeedAssignment"
    CALENDAR_EVENT = "CalendarEvent"
    PROXY_CALENDAR_EVENT = "ProxyCalendarEvent"
    STUDY_BLOCK = "StudyBlock"


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return {"High": 3, "Medium": 2, "Low": 1}[self.value]

    @classmethod
    def parse(cls, value: Union[str, "Priority", None]) -> "Priority":
        """
        Accepts 'high', 'High', Priority.HIGH ...
        Anything empty falls back to MEDIUM.
        """
        if isinstance(value, Priority):
            return value
        text = (value or "").strip().capitalize()
        if not text:
            return cls.MEDIUM
        return cls(text)


ASSIGNMENT_SOURCES = frozenset({SourceType.MANUAL_ASSIGNMENT, SourceType.FEED_ASSIGNMENT})

PRIORITY_COLORS: Dict[Priority, str] = {
    Priority.HIGH: "#e53935",
    Priority.MEDIUM: "#fb8c00",
    Priority.LOW: "#43a047",
}

# LMS assignments, whether they came from the feed or a calendar source
CANVAS_CATEGORY = "Canvas Assignment"
CANVAS_COLOR = "#ff9800"


# ---------------------------------------------------------------------------
# Event variants
# ---------------------------------------------------------------------------


@dataclass
class Event:
    """
    Common part of every calendar item.

    date_key is the YYYY-MM-DD bucket the event lives in; start_time and
    end_time are display strings ('HH:MM', empty for all-day items).
    """

    source_type: ClassVar[SourceType]

    id: str
    title: str
    date_key: str
    start_time: str = ""
    end_time: str = ""
    description: str = ""
    location: str = ""
    link: str = ""
    category: Optional[str] = None
    color: Optional[str] = None
    # start_time/end_time are UTC wall-clock (source instant was timezone-aware)
    utc: bool = False

    def __post_init__(self) -> None:
        self.title = (self.title or "").strip() or UNTITLED
        self.id = str(self.id)

    @property
    def due_date(self) -> str:
        return self.date_key


@dataclass
class ManualAssignment(Event):
    source_type: ClassVar[SourceType] = SourceType.MANUAL_ASSIGNMENT

    course: str = ""
    assignment_type: str = ""
    priority: Priority = Priority.MEDIUM
    completed: bool = False


@dataclass
class FeedAssignment(Event):
    source_type: ClassVar[SourceType] = SourceType.FEED_ASSIGNMENT

    course: str = ""
    assignment_type: str = ""


@dataclass
class CalendarEvent(Event):
    source_type: ClassVar[SourceType] = SourceType.CALENDAR_EVENT

    color_marker: Optional[str] = None
    canvas_like: bool = False


@dataclass
class ProxyCalendarEvent(Event):
    source_type: ClassVar[SourceType] = SourceType.PROXY_CALENDAR_EVENT


@dataclass
class StudyBlock(Event):
    source_type: ClassVar[SourceType] = SourceType.STUDY_BLOCK

    related_assignment: str = ""
    duration: str = "1 hour"


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------


def date_key_for(value: Union[date, datetime]) -> str:
    """
    Bucket key for an instant.

    Timezone-aware datetimes are truncated in UTC, naive datetimes and plain
    dates are taken as they are.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()


def time_of_day(value: Union[date, datetime, None]) -> str:
    """
    'HH:MM' for datetimes (UTC for aware ones), '' for all-day dates.
    """
    if not isinstance(value, datetime):
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%H:%M")


def is_aware(value: Union[date, datetime, None]) -> bool:
    return isinstance(value, datetime) and value.tzinfo is not None


def is_assignment(event: Event) -> bool:
    """
    Manual + feed assignments, and calendar items flagged as LMS assignments.
    """
    if event.source_type in ASSIGNMENT_SOURCES:
        return True
    return isinstance(event, CalendarEvent) and event.canvas_like


def shift_date_key(date_key: str, days: int) -> str:
    """
    Move a YYYY-MM-DD key by a number of days (negative = earlier).
    """
    d = datetime.strptime(date_key, DATE_FORMAT).date()
    return (d + timedelta(days=days)).isoformat()


def stable_event_id(prefix: str, title: str, date_key: str, start_time: str) -> str:
    """
    Deterministic id for sources that do not provide one.

    Same title + date + time always gives the same id, so re-fetching an
    id-less source replaces the earlier copy instead of duplicating it.
    """
    composite = f"{title}|{date_key}|{start_time}"
    digest = hashlib.sha256(composite.encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:16]}"
