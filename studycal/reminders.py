"""
Reminder requests for an external notification scheduler.

Nothing is delivered here. We only compute WHAT should be announced and
WHEN, so a host app (push notifications, e-mail, cron ...) can schedule it:

- every study block: at its own start time on its own day
- every open manual assignment: "due tomorrow" one day before at 17:00
- High priority assignments: an extra reminder three days before at 17:00

Triggers that already lie in the past are moved to one minute from now.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from studycal.model import DATE_FORMAT, ManualAssignment, Priority, StudyBlock
from studycal.store import EventStore


logger = logging.getLogger(__name__)

REMINDER_HOUR = 17


@dataclass
class ReminderRequest:
    title: str
    due_date: str
    time: str
    priority: Optional[str]
    trigger: datetime
    kind: str
    event_id: str


def trigger_at(date_key: str, days_before: int, hour: int, now: datetime, minute: int = 0) -> datetime:
    """
    Local (naive) trigger instant `days_before` days ahead of date_key.
    """
    day = datetime.strptime(date_key, DATE_FORMAT)
    trigger = day.replace(hour=hour, minute=minute) - timedelta(days=days_before)
    if trigger <= now:
        trigger = now + timedelta(minutes=1)
    return trigger


def _hour_minute(hhmm: str) -> tuple[int, int]:
    try:
        parsed = datetime.strptime(hhmm, "%H:%M")
    except ValueError:
        return REMINDER_HOUR, 0
    return parsed.hour, parsed.minute


def reminder_requests(store: EventStore, now: Optional[datetime] = None) -> List[ReminderRequest]:
    now = now or datetime.now()
    out: List[ReminderRequest] = []

    for event in store.events():
        if isinstance(event, StudyBlock):
            hour, minute = _hour_minute(event.start_time)
            out.append(
                ReminderRequest(
                    title=event.title,
                    due_date=event.date_key,
                    time=event.start_time,
                    priority=None,
                    trigger=trigger_at(event.date_key, 0, hour, now, minute),
                    kind="study-block",
                    event_id=event.id,
                )
            )
        elif isinstance(event, ManualAssignment) and not event.completed:
            out.append(
                ReminderRequest(
                    title=event.title,
                    due_date=event.date_key,
                    time=event.start_time,
                    priority=event.priority.value,
                    trigger=trigger_at(event.date_key, 1, REMINDER_HOUR, now),
                    kind="due-tomorrow",
                    event_id=event.id,
                )
            )
            if event.priority is Priority.HIGH:
                out.append(
                    ReminderRequest(
                        title=event.title,
                        due_date=event.date_key,
                        time=event.start_time,
                        priority=event.priority.value,
                        trigger=trigger_at(event.date_key, 3, REMINDER_HOUR, now),
                        kind="high-priority",
                        event_id=event.id,
                    )
                )

    out.sort(key=lambda r: r.trigger)
    logger.debug("Computed %d reminder request(s)", len(out))
    return out
