"""
Assignment list view: flatten the store and order it.

Only assignments are part of this view: manual + feed assignments and
calendar items flagged as LMS assignments (canvas_like). Other calendar
events, proxy events and study blocks are left out. Each returned event's
due_date is the date bucket it was stored under.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Tuple

from studycal.model import Event, Priority, is_assignment
from studycal.store import EventStore


logger = logging.getLogger(__name__)

SORT_KEYS = ("date", "class", "type", "priority", "category")


def all_assignments(store: EventStore) -> List[Event]:
    """
    Every assignment of the store, in date-bucket order.
    """
    return [e for e in store.events() if is_assignment(e)]


def _priority_rank(event: Event) -> int:
    # feed assignments carry no priority and rank below Low
    priority = getattr(event, "priority", None)
    return priority.rank if isinstance(priority, Priority) else 0


_SORT_KEY_FUNCS: Dict[str, Callable[[Event], Tuple]] = {
    "date": lambda e: (e.due_date,),
    "class": lambda e: (getattr(e, "course", "") or "",),
    "type": lambda e: (getattr(e, "assignment_type", "") or "",),
    "priority": lambda e: (-_priority_rank(e), e.due_date),
    "category": lambda e: (e.category or "Other", e.due_date),
}


def sorted_assignments(store: EventStore, key: str = "date") -> List[Event]:
    """
    Assignments ordered by `key` (date, class, type, priority, category).

    Unknown keys fall back to date. The sort is stable, so assignments that
    compare equal keep their relative order.
    """
    if key not in _SORT_KEY_FUNCS:
        logger.warning("Unknown sort key %r, sorting by date", key)
        key = "date"
    return sorted(all_assignments(store), key=_SORT_KEY_FUNCS[key])
