"""
iCalendar (.ics) export.

We convert the unified store (assignments, calendar events, study blocks)
into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Events with a start time get a timed VEVENT (study blocks last their
duration, other events run to their end time, possibly past midnight);
events without a start time become all-day entries. Times that came from
timezone-aware instants are written as UTC, the rest as floating local time.
Long lines are folded at 75 octets.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable

from studycal.model import DATE_FORMAT, Event, StudyBlock


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _duration_minutes(duration: str) -> int:
    """
    '1 hour' -> 60, '90 minutes' -> 90, '2 hours' -> 120. Defaults to 60.
    """
    m = re.match(r"\s*(\d+)\s*(h|hour|hours|m|min|mins|minute|minutes)?\s*$", duration or "")
    if not m:
        return 60
    amount = int(m.group(1))
    unit = m.group(2) or "minutes"
    return amount * 60 if unit.startswith("h") else amount


def _dt_local(date_yyyy_mm_dd: str, time_hh_mm: str) -> datetime:
    return datetime.strptime(f"{date_yyyy_mm_dd} {time_hh_mm}", "%Y-%m-%d %H:%M")


def _fold(line: str) -> list[str]:
    """
    Fold a content line into chunks of at most 75 octets (RFC 5545 3.1).
    Continuation chunks start with a single space.
    """
    if len(line.encode("utf-8")) <= 75:
        return [line]

    chunks: list[str] = []
    current = ""
    for ch in line:
        if len((current + ch).encode("utf-8")) > 75:
            chunks.append(current)
            current = " "
        current += ch
    chunks.append(current)
    return chunks


def _vevent_lines(ev: Event, dtstamp: str) -> list[str]:
    lines = ["BEGIN:VEVENT", f"UID:{_ics_escape(ev.id)}", f"DTSTAMP:{dtstamp}"]

    if ev.start_time:
        start = _dt_local(ev.date_key, ev.start_time)
        if isinstance(ev, StudyBlock):
            end = start + timedelta(minutes=_duration_minutes(ev.duration))
        elif ev.end_time:
            end = _dt_local(ev.date_key, ev.end_time)
            if end < start:
                # e.g. 23:59 -> 00:00, the end lies on the next day
                end += timedelta(days=1)
        else:
            end = start
        # UTC wall-clock times keep their 'Z', everything else stays floating
        fmt = "%Y%m%dT%H%M00Z" if ev.utc else "%Y%m%dT%H%M00"
        lines.append(f"DTSTART:{start.strftime(fmt)}")
        lines.append(f"DTEND:{end.strftime(fmt)}")
    else:
        day = datetime.strptime(ev.date_key, DATE_FORMAT)
        lines.append(f"DTSTART;VALUE=DATE:{day.strftime('%Y%m%d')}")
        lines.append(f"DTEND;VALUE=DATE:{(day + timedelta(days=1)).strftime('%Y%m%d')}")

    lines.append(f"SUMMARY:{_ics_escape(ev.title)}")
    if ev.description:
        lines.append(f"DESCRIPTION:{_ics_escape(ev.description)}")
    if ev.location:
        lines.append(f"LOCATION:{_ics_escape(ev.location)}")
    if ev.category:
        lines.append(f"CATEGORIES:{_ics_escape(ev.category)}")
    lines.append("END:VEVENT")
    return lines


def export_events_to_ics(events: Iterable[Event], out_path: str | Path) -> int:
    """
    Export events to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//StudyCal//EN")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    count = 0
    for ev in events:
        try:
            lines.extend(_vevent_lines(ev, dtstamp))
        except ValueError:
            # unparsable date/time strings
            continue
        count += 1

    lines.append("END:VCALENDAR")

    folded = [chunk for line in lines for chunk in _fold(line)]

    # ICS standard uses CRLF
    out.write_text("\r\n".join(folded) + "\r\n", encoding="utf-8")
    return count
