"""
Unit tests for the event store / merge engine.

Merge contract:
- upsert by id inside the event's date bucket
- merging the same batch twice == merging it once
- other source types in the same bucket are never touched
- a batch must only contain events of its declared source
"""

import unittest

from studycal.errors import MergeError
from studycal.model import (
    CalendarEvent,
    FeedAssignment,
    ManualAssignment,
    Priority,
    ProxyCalendarEvent,
    SourceType,
    StudyBlock,
)
from studycal.store import EventStore


def _snapshot(store: EventStore) -> dict:
    return {d: sorted((e.source_type.value, e.id, e.title) for e in store.bucket(d)) for d in store.date_keys()}


class TestMergeBatch(unittest.TestCase):
    def test_merge_buckets_by_date(self) -> None:
        store = EventStore()
        store.merge_batch(
            SourceType.FEED_ASSIGNMENT,
            [
                FeedAssignment(id="a", title="A", date_key="2024-12-15"),
                FeedAssignment(id="b", title="B", date_key="2024-12-18"),
            ],
        )
        self.assertEqual(store.date_keys(), ["2024-12-15", "2024-12-18"])
        self.assertEqual(len(store), 2)
        self.assertIn("2024-12-15", store)
        self.assertNotIn("2024-12-16", store)

    def test_idempotent_re_merge(self) -> None:
        batch = [
            CalendarEvent(id="g1", title="Calculus", date_key="2024-12-15"),
            CalendarEvent(id="g2", title="Practice", date_key="2024-12-15"),
        ]
        once = EventStore().merge_batch(SourceType.CALENDAR_EVENT, batch)
        twice = EventStore().merge_batch(SourceType.CALENDAR_EVENT, batch).merge_batch(SourceType.CALENDAR_EVENT, batch)
        self.assertEqual(_snapshot(once), _snapshot(twice))
        self.assertEqual(len(twice), 2)

    def test_same_id_replaces_previous_version(self) -> None:
        store = EventStore()
        store.merge_batch(SourceType.CALENDAR_EVENT, [CalendarEvent(id="g1", title="Old", date_key="2024-12-15")])
        store.merge_batch(SourceType.CALENDAR_EVENT, [CalendarEvent(id="g1", title="New", date_key="2024-12-15")])
        self.assertEqual([e.title for e in store.bucket("2024-12-15")], ["New"])

    def test_other_sources_are_preserved(self) -> None:
        store = EventStore()
        manual = ManualAssignment(id="m1", title="Essay", date_key="2024-12-15")
        store.merge_batch(SourceType.MANUAL_ASSIGNMENT, [manual])
        store.merge_batch(
            SourceType.PROXY_CALENDAR_EVENT,
            [ProxyCalendarEvent(id="p1", title="Chapel", date_key="2024-12-15")],
        )
        store.merge_batch(
            SourceType.PROXY_CALENDAR_EVENT,
            [ProxyCalendarEvent(id="p1", title="Chapel (moved)", date_key="2024-12-15")],
        )
        bucket = store.bucket("2024-12-15")
        self.assertIn(manual, bucket)
        self.assertEqual(len(bucket), 2)

    def test_ids_are_scoped_per_source(self) -> None:
        store = EventStore()
        store.merge_batch(SourceType.FEED_ASSIGNMENT, [FeedAssignment(id="42", title="Feed", date_key="2024-12-15")])
        store.merge_batch(SourceType.CALENDAR_EVENT, [CalendarEvent(id="42", title="Cal", date_key="2024-12-15")])
        self.assertEqual(sorted(e.title for e in store.bucket("2024-12-15")), ["Cal", "Feed"])

    def test_same_id_in_other_bucket_is_not_deduplicated(self) -> None:
        store = EventStore()
        store.merge_batch(SourceType.FEED_ASSIGNMENT, [FeedAssignment(id="x", title="X", date_key="2024-12-15")])
        store.merge_batch(SourceType.FEED_ASSIGNMENT, [FeedAssignment(id="x", title="X", date_key="2024-12-16")])
        self.assertEqual(len(store), 2)

    def test_mismatched_batch_is_rejected(self) -> None:
        store = EventStore()
        batch = [
            FeedAssignment(id="ok", title="OK", date_key="2024-12-15"),
            CalendarEvent(id="bad", title="Bad", date_key="2024-12-15"),
        ]
        with self.assertRaises(MergeError):
            store.merge_batch(SourceType.FEED_ASSIGNMENT, batch)
        self.assertEqual(len(store), 0)

    def test_empty_batch(self) -> None:
        store = EventStore().merge_batch(SourceType.FEED_ASSIGNMENT, [])
        self.assertEqual(len(store), 0)
        self.assertEqual(store.date_keys(), [])


class TestStoreHelpers(unittest.TestCase):
    def setUp(self) -> None:
        self.store = EventStore()
        self.store.merge_batch(
            SourceType.MANUAL_ASSIGNMENT,
            [ManualAssignment(id="m1", title="Essay", date_key="2024-12-15", priority=Priority.HIGH)],
        )
        self.store.merge_batch(
            SourceType.STUDY_BLOCK,
            [StudyBlock(id="study_m1", title="Study for Essay", date_key="2024-12-14", related_assignment="m1")],
        )
        self.store.merge_batch(
            SourceType.CALENDAR_EVENT,
            [CalendarEvent(id="g1", title="Math", date_key="2024-12-15", color="#1e88e5")],
        )

    def test_toggle_completion(self) -> None:
        updated = self.store.toggle_completion("m1", "2024-12-15")
        self.assertTrue(updated.completed)
        self.assertTrue(self.store.find("m1", "2024-12-15").completed)
        self.assertFalse(self.store.toggle_completion("m1", "2024-12-15").completed)

    def test_toggle_unknown_raises(self) -> None:
        with self.assertRaises(KeyError):
            self.store.toggle_completion("nope", "2024-12-15")
        # calendar events cannot be completed
        with self.assertRaises(KeyError):
            self.store.toggle_completion("g1", "2024-12-15")

    def test_remove_source(self) -> None:
        removed = self.store.remove_source(SourceType.STUDY_BLOCK)
        self.assertEqual(removed, 1)
        self.assertEqual(self.store.date_keys(), ["2024-12-15"])

    def test_counts_by_source(self) -> None:
        self.assertEqual(
            self.store.counts_by_source(),
            {SourceType.MANUAL_ASSIGNMENT: 1, SourceType.STUDY_BLOCK: 1, SourceType.CALENDAR_EVENT: 1},
        )

    def test_marked_dates(self) -> None:
        marked = self.store.marked_dates()
        # manual assignment dot uses the priority color
        self.assertEqual(marked["2024-12-15"], ["#e53935", "#1e88e5"])
        # the study block day stays unmarked
        self.assertNotIn("2024-12-14", marked)

    def test_bucket_is_a_copy(self) -> None:
        self.store.bucket("2024-12-15").clear()
        self.assertEqual(len(self.store.bucket("2024-12-15")), 2)


if __name__ == "__main__":
    unittest.main()
