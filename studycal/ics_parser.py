"""
Parsing (iCalendar feed text -> FeedAssignment events).

- Decodes an RFC 5545 document with `icalendar`
- Turns EACH VEVENT into exactly ONE FeedAssignment
- date_key is taken from DTSTART (UTC date for timezone-aware instants)

Important rules:
- No recurrence / RRULE expansion
- No all-day special casing (an exclusive DTEND is kept as it is)
- A feed with zero usable VEVENT blocks is a ParseError, the caller decides
  whether to fall back to sample_feed()
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from icalendar import Calendar

from studycal.errors import ParseError
from studycal.model import (
    CANVAS_CATEGORY,
    CANVAS_COLOR,
    FeedAssignment,
    date_key_for,
    is_aware,
    stable_event_id,
    time_of_day,
)
from studycal.text import clean, plain_text


logger = logging.getLogger(__name__)

FEED_CATEGORY = CANVAS_CATEGORY
FEED_COLOR = CANVAS_COLOR


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _decoded_instant(component: Any, name: str) -> Optional[Any]:
    """
    Return the date/datetime value of DTSTART/DTEND, or None if missing.
    """
    prop = component.get(name)
    if prop is None:
        return None
    return getattr(prop, "dt", None)


def _vevent_to_event(component: Any) -> Optional[FeedAssignment]:
    """
    Converts exactly one VEVENT into exactly one FeedAssignment.
    """
    start = _decoded_instant(component, "DTSTART")
    if start is None:
        logger.warning("Skipping VEVENT without DTSTART: %s", clean(component.get("SUMMARY")))
        return None

    end = _decoded_instant(component, "DTEND")

    title = clean(component.get("SUMMARY"))
    date_key = date_key_for(start)
    start_time = time_of_day(start)

    uid = clean(component.get("UID"))
    if not uid:
        uid = stable_event_id("feed", title, date_key, start_time)

    return FeedAssignment(
        id=uid,
        title=title,
        date_key=date_key,
        start_time=start_time,
        end_time=time_of_day(end),
        description=plain_text(component.get("DESCRIPTION")),
        location=clean(component.get("LOCATION")),
        link=clean(component.get("URL")),
        category=FEED_CATEGORY,
        color=FEED_COLOR,
        utc=is_aware(start),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse(feed_text: str) -> List[FeedAssignment]:
    """
    Parse a calendar feed document into FeedAssignment events.

    Raises ParseError if the text is not a calendar or holds no events.
    """
    if not feed_text or "BEGIN:VCALENDAR" not in feed_text:
        raise ParseError("Feed text is not an iCalendar document")

    try:
        calendar = Calendar.from_ical(feed_text)
    except ValueError as exc:
        raise ParseError(f"Failed to decode calendar feed: {exc}") from exc

    vevents = calendar.walk("VEVENT")
    if not vevents:
        raise ParseError("Calendar feed contains no VEVENT blocks")

    events: List[FeedAssignment] = []
    for component in vevents:
        event = _vevent_to_event(component)
        if event:
            events.append(event)

    if not events:
        raise ParseError("Calendar feed contains no usable events")

    logger.info("Parsed %d events out of %d VEVENT blocks", len(events), len(vevents))
    return events


def parse_or_sample(feed_text: str) -> List[FeedAssignment]:
    """
    parse(), but substitute the built-in sample feed when the text is unusable.
    """
    try:
        return parse(feed_text)
    except ParseError as exc:
        logger.warning("Feed could not be parsed (%s), using sample feed instead", exc)
        return parse(sample_feed())


def sample_feed() -> str:
    """
    A small known-good feed with five assignments in December 2024.
    """
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Canvas LMS//NONSGML v1.0//EN",
    ]
    samples = [
        ("20241215", "20241216", "Math Assignment Due", "Complete calculus problem set", "Online"),
        ("20241218", "20241219", "History Essay Due", "Write 5-page essay on World War II", "Online"),
        ("20241220", "20241221", "Science Lab Report Due", "Complete chemistry lab analysis", "Online"),
        ("20241222", "20241223", "English Literature Paper Due", "Analyze themes in Shakespeare's Hamlet", "Online"),
        ("20241225", "20241226", "Final Project Presentation", "Present your semester-long research project", "Classroom A101"),
    ]
    for day, next_day, summary, description, location in samples:
        lines += [
            "BEGIN:VEVENT",
            f"UID:sample-{day}@studycal",
            f"DTSTART:{day}T235900Z",
            f"DTEND:{next_day}T000000Z",
            f"SUMMARY:{summary}",
            f"DESCRIPTION:{description}",
            f"LOCATION:{location}",
            "END:VEVENT",
        ]
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"
