"""
CLI (Command Line Interface).

This module provides terminal commands on top of the event engine, e.g.:

    studycal parse <feed.ics|url>
    studycal plan <feed.ics> --calendar-json items.json --strategy rotate
    studycal assignments <feed.ics> --manual-json forms.json --sort priority
    studycal export <feed.ics> --out calendar.ics
    studycal reminders <feed.ics> --manual-json forms.json

Every command builds a fresh EventStore from the given sources:
- positional arguments are ICS feeds (files or URLs)
- --calendar-json: Calendar API items (list or {"items": [...]})
- --proxy-json:    Apps Script proxy records
- --manual-json:   manually entered assignment forms
"""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from studycal.adapters import from_calendar_api, from_manual_entry, from_proxy
from studycal.config import Settings
from studycal.errors import ParseError, StudyCalError
from studycal.export_ics import export_events_to_ics
from studycal.ics_parser import parse, parse_or_sample
from studycal.log import setup_logging
from studycal.model import Event, ManualAssignment, SourceType
from studycal.query import SORT_KEYS, sorted_assignments
from studycal.reminders import reminder_requests
from studycal.sources import fetch_feed_text, fetch_json_records
from studycal.store import EventStore
from studycal.study_blocks import STRATEGIES, schedule_study_blocks


logger = logging.getLogger(__name__)

console = Console()


# ---------------------------------------------------------------------------
# Store building
# ---------------------------------------------------------------------------


def _load_feed(source: str, settings: Settings, sample_fallback: bool) -> list[Event]:
    text = fetch_feed_text(source, timeout=settings.timeout)
    if sample_fallback:
        return list(parse_or_sample(text))
    return list(parse(text))


def build_store(args: argparse.Namespace, settings: Settings) -> EventStore:
    """
    Read every source given on the command line and merge it into one store.
    """
    store = EventStore()

    feeds = list(args.feeds) or ([settings.feed_url] if settings.feed_url else [])
    for source in feeds:
        store.merge_batch(SourceType.FEED_ASSIGNMENT, _load_feed(source, settings, args.sample_fallback))

    for source in args.calendar_json:
        store.merge_batch(SourceType.CALENDAR_EVENT, from_calendar_api(fetch_json_records(source, settings.timeout)))

    proxies = list(args.proxy_json) or ([settings.proxy_url] if settings.proxy_url else [])
    for source in proxies:
        store.merge_batch(SourceType.PROXY_CALENDAR_EVENT, from_proxy(fetch_json_records(source, settings.timeout)))

    for source in args.manual_json:
        forms = fetch_json_records(source, settings.timeout)
        store.merge_batch(SourceType.MANUAL_ASSIGNMENT, [from_manual_entry(f) for f in forms])

    return store


def _apply_overrides(args: argparse.Namespace, settings: Settings) -> Settings:
    """
    CLI flags win over STUDYCAL_* environment variables.
    """
    for name in ("strategy", "study_time", "days_before", "max_per_day", "max_hours_per_day", "timeout"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(settings, name, value)
    if getattr(args, "preferred_times", None):
        settings.preferred_times = [t.strip() for t in args.preferred_times.split(",") if t.strip()]
    if args.verbose:
        settings.log_level = "DEBUG"
    return settings


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _time_range(ev: Event) -> str:
    if ev.start_time and ev.end_time:
        return f"{ev.start_time}-{ev.end_time}"
    return ev.start_time or "all day"


def _events_table(title: str, events: Sequence[Event]) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Source")
    table.add_column("Title")
    table.add_column("Category")
    for ev in events:
        table.add_row(ev.date_key, _time_range(ev), ev.source_type.value, ev.title, ev.category or "")
    return table


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_parse(args: argparse.Namespace, settings: Settings) -> int:
    """
    Parse one feed and print its events.
    """
    events = _load_feed(args.source, settings, args.sample_fallback)
    if not events:
        console.print("No events.")
        return 0
    console.print(_events_table(f"{len(events)} events", events))
    return 0


def _cmd_plan(args: argparse.Namespace, settings: Settings) -> int:
    """
    Merge all sources, add study blocks and print the calendar day by day.
    """
    store = build_store(args, settings)
    blocks = schedule_study_blocks(store, settings.plan_config())

    if not len(store):
        console.print("No events.")
        return 0

    console.print(_events_table("Study calendar", list(store.events())))
    console.print(f"Study blocks: {len(blocks)}")
    for source_type, count in sorted(store.counts_by_source().items(), key=lambda kv: kv[0].value):
        console.print(f"  {source_type.value}: {count}")
    return 0


def _cmd_assignments(args: argparse.Namespace, settings: Settings) -> int:
    """
    Print the assignment list in the requested order.
    """
    store = build_store(args, settings)
    assignments = sorted_assignments(store, args.sort)
    if not assignments:
        console.print("No assignments.")
        return 0

    table = Table(title=f"Assignments by {args.sort}", box=box.SIMPLE)
    for col in ("Due", "Title", "Course", "Type", "Priority", "Category", "Done"):
        table.add_column(col)
    for a in assignments:
        manual = isinstance(a, ManualAssignment)
        table.add_row(
            a.due_date,
            a.title,
            getattr(a, "course", ""),
            getattr(a, "assignment_type", ""),
            a.priority.value if manual else "",
            a.category or "Other",
            "x" if manual and a.completed else "",
        )
    console.print(table)
    return 0


def _cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    """
    Export the merged calendar (with study blocks) into an .ics file.
    """
    out_path = (args.out or "").strip()
    if not out_path:
        console.print("Please provide output .ics path.")
        return 1

    store = build_store(args, settings)
    if not args.no_study_blocks:
        schedule_study_blocks(store, settings.plan_config())

    if not len(store):
        console.print("No events to export.")
        return 0

    n = export_events_to_ics(store.events(), out_path)
    console.print(f"Exported {n} events to: {out_path}")
    return 0


def _cmd_reminders(args: argparse.Namespace, settings: Settings) -> int:
    """
    Print when reminders for study blocks and assignments should fire.
    """
    store = build_store(args, settings)
    schedule_study_blocks(store, settings.plan_config())

    requests_ = reminder_requests(store)
    if not requests_:
        console.print("No reminders.")
        return 0

    table = Table(title="Reminders", box=box.SIMPLE)
    for col in ("Trigger", "Kind", "Title", "Due", "Priority"):
        table.add_column(col)
    for r in requests_:
        table.add_row(r.trigger.strftime("%Y-%m-%d %H:%M"), r.kind, r.title, r.due_date, r.priority or "")
    console.print(table)
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _source_options() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(add_help=False)
    p.add_argument("feeds", nargs="*", help="ICS feeds (file paths or URLs)")
    p.add_argument("--calendar-json", action="append", default=[], help="Calendar API items (JSON)")
    p.add_argument("--proxy-json", action="append", default=[], help="Apps Script proxy records (JSON)")
    p.add_argument("--manual-json", action="append", default=[], help="Manual assignment forms (JSON)")
    return p


def _plan_options() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(add_help=False)
    p.add_argument("--strategy", choices=STRATEGIES, help="Study block strategy")
    p.add_argument("--study-time", help="Study time for the 'single' strategy (HH:MM)")
    p.add_argument("--preferred-times", help="Comma separated slots for 'rotate'/'budget'")
    p.add_argument("--days-before", type=int, help="Days between study block and due date")
    p.add_argument("--max-per-day", type=int, help="Max study blocks per day ('rotate')")
    p.add_argument("--max-hours-per-day", type=int, help="Max study hours per day ('budget')")
    return p


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    common.add_argument("--timeout", type=int, help="HTTP timeout in seconds")
    common.add_argument(
        "--sample-fallback", action="store_true", help="Use the built-in sample feed if a feed cannot be parsed"
    )

    sources = _source_options()
    plan = _plan_options()

    parser = argparse.ArgumentParser(prog="studycal", description="StudyCal CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", parents=[common], help="Parse one ICS feed")
    p_parse.add_argument("source", type=str, help="Feed file path or URL")

    sub.add_parser("plan", parents=[common, sources, plan], help="Merge sources and add study blocks")

    p_list = sub.add_parser("assignments", parents=[common, sources], help="List assignments")
    p_list.add_argument("--sort", default="date", choices=SORT_KEYS, help="Sort key")

    p_export = sub.add_parser("export", parents=[common, sources, plan], help="Export merged calendar to .ics")
    p_export.add_argument("--out", type=str, required=True, help="Output file path (e.g. out.ics)")
    p_export.add_argument("--no-study-blocks", action="store_true", help="Do not add study blocks")

    sub.add_parser("reminders", parents=[common, sources, plan], help="Show reminder trigger times")

    return parser


_COMMANDS = {
    "parse": _cmd_parse,
    "plan": _cmd_plan,
    "assignments": _cmd_assignments,
    "export": _cmd_export,
    "reminders": _cmd_reminders,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _apply_overrides(args, Settings.from_env())
        setup_logging(settings.log_level)
        code = _COMMANDS[args.command](args, settings)
    except ParseError as exc:
        console.print(f"Could not parse feed: {exc}", markup=False)
        console.print("Hint: re-run with --sample-fallback to use the sample feed.")
        raise SystemExit(1)
    except StudyCalError as exc:
        console.print(f"Error: {exc}", markup=False)
        raise SystemExit(1)

    raise SystemExit(code)
