"""
Adapters: vendor / form records -> Event variants.

Three inputs are handled here (the ICS feed has its own parser module):

- Calendar API items   {id, summary, description, start, end, location, htmlLink, colorId}
- Apps Script proxy    {id, title, description, start, end, location}
- Manual entry form    {title, description, dueDate, time, course, assignmentType, priority}

Calendar API and proxy items go through the classifier; manual entries take
their category and color from what the user picked. Calendar API items that
look like LMS assignments (reserved color or keywords) are shown as such
instead of with their classifier category.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from studycal.classify import classify, is_canvas_like
from studycal.errors import ValidationError
from studycal.model import (
    CANVAS_CATEGORY,
    CANVAS_COLOR,
    DATE_FORMAT,
    PRIORITY_COLORS,
    CalendarEvent,
    ManualAssignment,
    Priority,
    ProxyCalendarEvent,
    date_key_for,
    is_aware,
    stable_event_id,
    time_of_day,
)
from studycal.text import clean, plain_text


logger = logging.getLogger(__name__)

DEFAULT_DUE_TIME = "23:59"


# ---------------------------------------------------------------------------
# Instant parsing
# ---------------------------------------------------------------------------


def parse_instant(value: Any) -> Optional[Union[date, datetime]]:
    """
    Parse an ISO 8601 string ('2024-12-15', '2024-12-15T23:59:00Z', ...).

    Date-only strings become a date (all-day); anything unparsable -> None.
    """
    if isinstance(value, (date, datetime)):
        return value
    text = clean(value)
    if not text:
        return None
    if len(text) == 10:
        try:
            return datetime.strptime(text, DATE_FORMAT).date()
        except ValueError:
            return None
    # fromisoformat() only learned about 'Z' in 3.11
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _api_instant(value: Any) -> Optional[Union[date, datetime]]:
    """
    Calendar API start/end objects look like {"dateTime": ...} or {"date": ...}.
    """
    if isinstance(value, dict):
        return parse_instant(value.get("dateTime") or value.get("date"))
    return parse_instant(value)


# ---------------------------------------------------------------------------
# Calendar API
# ---------------------------------------------------------------------------


def calendar_api_item_to_event(item: Dict[str, Any]) -> Optional[CalendarEvent]:
    """
    Converts one Calendar API item. Items without a usable start are dropped.
    """
    start = _api_instant(item.get("start"))
    if start is None:
        logger.warning("Skipping calendar item without start: %r", item.get("summary"))
        return None

    end = _api_instant(item.get("end")) or start

    title = clean(item.get("summary") or item.get("title")) or "Google Event"
    description = plain_text(item.get("description"))
    color_marker = clean(item.get("colorId")) or None

    date_key = date_key_for(start)
    start_time = time_of_day(start)

    event_id = clean(item.get("id")) or stable_event_id("calendar", title, date_key, start_time)
    canvas_like = is_canvas_like(title, description, color_marker)
    if canvas_like:
        category, color = CANVAS_CATEGORY, CANVAS_COLOR
    else:
        classification = classify(title, description)
        category, color = classification.category, classification.color

    return CalendarEvent(
        id=event_id,
        title=title,
        date_key=date_key,
        start_time=start_time,
        end_time=time_of_day(end),
        description=description,
        location=clean(item.get("location")),
        link=clean(item.get("htmlLink")),
        category=category,
        color=color,
        utc=is_aware(start),
        color_marker=color_marker,
        canvas_like=canvas_like,
    )


def from_calendar_api(items: Iterable[Dict[str, Any]]) -> List[CalendarEvent]:
    events: List[CalendarEvent] = []
    for item in items:
        event = calendar_api_item_to_event(item)
        if event:
            events.append(event)
    logger.info(
        "Adapted %d calendar events (%d look like assignments)",
        len(events),
        sum(1 for e in events if e.canvas_like),
    )
    return events


# ---------------------------------------------------------------------------
# Apps Script proxy
# ---------------------------------------------------------------------------


def proxy_record_to_event(record: Dict[str, Any]) -> Optional[ProxyCalendarEvent]:
    start = parse_instant(record.get("start"))
    if start is None:
        logger.warning("Skipping proxy record without start: %r", record.get("title"))
        return None

    end = parse_instant(record.get("end"))
    title = clean(record.get("title"))
    description = plain_text(record.get("description"))

    date_key = date_key_for(start)
    start_time = time_of_day(start)
    classification = classify(title, description)

    return ProxyCalendarEvent(
        id=clean(record.get("id")) or stable_event_id("proxy", title, date_key, start_time),
        title=title,
        date_key=date_key,
        start_time=start_time,
        end_time=time_of_day(end) if end is not None else "",
        description=description,
        location=clean(record.get("location")),
        category=classification.category,
        color=classification.color,
        utc=is_aware(start),
    )


def from_proxy(records: Iterable[Dict[str, Any]]) -> List[ProxyCalendarEvent]:
    events: List[ProxyCalendarEvent] = []
    for record in records:
        event = proxy_record_to_event(record)
        if event:
            events.append(event)
    logger.info("Adapted %d proxy events", len(events))
    return events


# ---------------------------------------------------------------------------
# Manual entry
# ---------------------------------------------------------------------------


def from_manual_entry(form: Dict[str, Any]) -> ManualAssignment:
    """
    Build a ManualAssignment from a submitted form.

    Title and dueDate (YYYY-MM-DD) are required.
    """
    title = clean(form.get("title"))
    due_date = clean(form.get("dueDate"))
    if not title or not due_date:
        raise ValidationError("Please fill in assignment title and due date")

    try:
        datetime.strptime(due_date, DATE_FORMAT)
    except ValueError as exc:
        raise ValidationError(f"Invalid due date {due_date!r}, expected YYYY-MM-DD") from exc

    try:
        priority = Priority.parse(form.get("priority"))
    except ValueError as exc:
        raise ValidationError(f"Unknown priority {form.get('priority')!r}") from exc

    assignment_type = clean(form.get("assignmentType"))

    return ManualAssignment(
        id=clean(form.get("id")) or uuid.uuid4().hex,
        title=title,
        date_key=due_date,
        start_time=clean(form.get("time")) or DEFAULT_DUE_TIME,
        description=clean(form.get("description")),
        category=assignment_type or "Other",
        color=PRIORITY_COLORS[priority],
        course=clean(form.get("course")),
        assignment_type=assignment_type,
        priority=priority,
        completed=bool(form.get("completed", False)),
    )
