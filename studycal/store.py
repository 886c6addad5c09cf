"""
Event store + merge engine.

The store maps date_key -> list of events (one bucket per day). All four
sources (feed, calendar API, proxy, manual entry) and the study-block
generator write into it through merge_batch().

Merge rules:
- upsert by id WITHIN the bucket of the incoming event
  (same id in a different bucket is NOT deduplicated)
- only events of the same source type are replaced, other sources are
  never touched
- order inside a bucket carries no meaning

The store is a plain object owned by the caller. Writes are expected to be
serialized by the host (one merge at a time).
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional

from studycal.errors import MergeError
from studycal.model import PRIORITY_COLORS, Event, ManualAssignment, SourceType, StudyBlock


logger = logging.getLogger(__name__)


class EventStore:
    def __init__(self) -> None:
        self._buckets: Dict[str, List[Event]] = defaultdict(list)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def merge_batch(self, source_type: SourceType, events: Iterable[Event]) -> "EventStore":
        """
        Merge one batch of events coming from `source_type`.

        Raises MergeError (and merges nothing) if an event in the batch
        belongs to another source.
        """
        batch = list(events)
        for event in batch:
            if event.source_type != source_type:
                raise MergeError(
                    f"Event {event.id!r} is a {event.source_type.value}, "
                    f"batch was declared as {source_type.value}"
                )

        replaced = 0
        for event in batch:
            bucket = self._buckets[event.date_key]
            kept = [e for e in bucket if not (e.source_type == source_type and e.id == event.id)]
            replaced += len(bucket) - len(kept)
            kept.append(event)
            self._buckets[event.date_key] = kept

        logger.info(
            "Merged %d %s event(s), replaced %d existing",
            len(batch),
            source_type.value,
            replaced,
        )
        return self

    def remove_source(self, source_type: SourceType) -> int:
        """
        Drop every event of one source. Returns the number removed.
        """
        removed = 0
        for date_key in list(self._buckets):
            bucket = self._buckets[date_key]
            kept = [e for e in bucket if e.source_type != source_type]
            removed += len(bucket) - len(kept)
            if kept:
                self._buckets[date_key] = kept
            else:
                del self._buckets[date_key]
        logger.debug("Removed %d %s event(s)", removed, source_type.value)
        return removed

    def toggle_completion(self, assignment_id: str, date_key: str) -> ManualAssignment:
        """
        Flip the completed flag of a manual assignment.

        Raises KeyError if no manual assignment with that id is due on date_key.
        """
        bucket = self._buckets.get(date_key, [])
        for index, event in enumerate(bucket):
            if isinstance(event, ManualAssignment) and event.id == assignment_id:
                updated = replace(event, completed=not event.completed)
                bucket[index] = updated
                logger.info(
                    "Assignment %r marked %s",
                    updated.title,
                    "completed" if updated.completed else "open",
                )
                return updated
        raise KeyError(f"No manual assignment {assignment_id!r} on {date_key}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def bucket(self, date_key: str) -> List[Event]:
        return list(self._buckets.get(date_key, []))

    def date_keys(self) -> List[str]:
        return sorted(k for k, v in self._buckets.items() if v)

    def events(self) -> Iterator[Event]:
        for date_key in self.date_keys():
            yield from self._buckets[date_key]

    def find(self, event_id: str, date_key: str) -> Optional[Event]:
        for event in self._buckets.get(date_key, []):
            if event.id == event_id:
                return event
        return None

    def counts_by_source(self) -> Dict[SourceType, int]:
        return dict(Counter(e.source_type for e in self.events()))

    def marked_dates(self) -> Dict[str, List[str]]:
        """
        For each date, the distinct dot colors of its events (first seen first).
        Manual assignments are colored by priority. Study blocks get no dot,
        so a day holding only study blocks is not marked.
        """
        marked: Dict[str, List[str]] = {}
        for date_key in self.date_keys():
            colors: List[str] = []
            for event in self._buckets[date_key]:
                if isinstance(event, StudyBlock):
                    continue
                if isinstance(event, ManualAssignment):
                    color = PRIORITY_COLORS[event.priority]
                else:
                    color = event.color or "#2196f3"
                if color not in colors:
                    colors.append(color)
            if colors:
                marked[date_key] = colors
        return marked

    def __len__(self) -> int:
        return sum(len(v) for v in self._buckets.values())

    def __contains__(self, date_key: object) -> bool:
        return bool(self._buckets.get(date_key))  # type: ignore[arg-type]
