import tempfile
import unittest
from pathlib import Path

from studycal.export_ics import export_events_to_ics
from studycal.model import FeedAssignment, ManualAssignment, StudyBlock


def _export(events) -> tuple[int, str]:
    with tempfile.TemporaryDirectory() as d:
        out = Path(d) / "out.ics"
        n = export_events_to_ics(events, out)
        # read_text() would turn CRLF into LF
        return n, out.read_bytes().decode("utf-8")


class TestExportICS(unittest.TestCase):
    def test_export_creates_file_and_contains_calendar(self) -> None:
        events = [
            FeedAssignment(
                id="sample-20241215@studycal",
                title="Math Assignment Due",
                date_key="2024-12-15",
                start_time="23:59",
                end_time="00:00",
                location="Online",
                category="Canvas Assignment",
                utc=True,
            ),
            StudyBlock(
                id="study_sample",
                title="Study for Math Assignment Due",
                date_key="2024-12-14",
                start_time="19:00",
                duration="90 minutes",
            ),
            ManualAssignment(id="m1", title="Essay, draft", date_key="2024-12-20"),
        ]

        n, text = _export(events)
        self.assertEqual(n, 3)
        self.assertTrue(text.startswith("BEGIN:VCALENDAR\r\n"))
        self.assertTrue(text.endswith("END:VCALENDAR\r\n"))
        self.assertEqual(text.count("BEGIN:VEVENT"), 3)
        self.assertIn("SUMMARY:Math Assignment Due", text)
        # 23:59Z -> 00:00Z ends on the next day
        self.assertIn("DTSTART:20241215T235900Z\r\nDTEND:20241216T000000Z", text)
        # study block: floating local time, lasts its duration
        self.assertIn("DTSTART:20241214T190000\r\nDTEND:20241214T203000", text)
        self.assertIn("DTSTART;VALUE=DATE:20241220", text)
        self.assertIn("SUMMARY:Essay\\, draft", text)

    def test_long_lines_are_folded(self) -> None:
        description = "Read chapters one to five and take notes on every section " * 3
        _, text = _export([ManualAssignment(id="m", title="Reading", date_key="2024-12-20", description=description)])

        lines = text.split("\r\n")
        self.assertTrue(all(len(line.encode("utf-8")) <= 75 for line in lines))
        start = next(i for i, line in enumerate(lines) if line.startswith("DESCRIPTION:"))
        self.assertTrue(lines[start + 1].startswith(" "))
        unfolded = text.replace("\r\n ", "")
        self.assertIn("DESCRIPTION:" + description.strip(), unfolded)

    def test_invalid_time_is_skipped(self) -> None:
        n, text = _export([FeedAssignment(id="x", title="X", date_key="2024-12-15", start_time="late")])
        self.assertEqual(n, 0)
        self.assertNotIn("BEGIN:VEVENT", text)


if __name__ == "__main__":
    unittest.main()
