"""
Study block generation.

For every assignment a "Study for ..." block is placed `days_before` days
ahead of its due date. One generator, three strategies:

    single  - one block per assignment, always at study_time
    rotate  - assignments in input order; the n-th block on a day gets
              preferred_times[n % len(preferred_times)]; at most
              max_per_day blocks per day
    budget  - assignments sorted by due date; each block costs one hour;
              at most max_hours_per_day hours per day; the time slot is
              preferred_times[hours_used] (or the first slot once the list
              runs out)

Assignments that do not fit under a daily cap are skipped silently. Compare
len(result) with len(assignments) if you need to know.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from studycal.errors import ValidationError
from studycal.model import Event, ManualAssignment, SourceType, StudyBlock, shift_date_key
from studycal.query import all_assignments
from studycal.store import EventStore


logger = logging.getLogger(__name__)

STRATEGIES = ("single", "rotate", "budget")
STUDY_COLOR = "#4caf50"


@dataclass
class StudyPlanConfig:
    strategy: str = "single"
    study_time: str = "19:00"
    preferred_times: List[str] = field(default_factory=lambda: ["19:00", "20:00", "21:00"])
    duration: str = "1 hour"
    days_before: int = 1
    max_per_day: int = 3
    max_hours_per_day: int = 3

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValidationError(f"Unknown study strategy {self.strategy!r} (expected one of {', '.join(STRATEGIES)})")
        if self.strategy != "single" and not self.preferred_times:
            raise ValidationError("preferred_times must not be empty")
        if self.days_before < 0:
            raise ValidationError("days_before must be >= 0")
        for t in [self.study_time, *self.preferred_times]:
            try:
                datetime.strptime(t, "%H:%M")
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"Invalid study time {t!r}, expected HH:MM") from exc


def _make_block(assignment: Event, date_key: str, time: str, duration: str) -> StudyBlock:
    return StudyBlock(
        # assignment ids are only unique per source
        id=f"study_{assignment.source_type.value}_{assignment.id}",
        title=f"Study for {assignment.title}",
        date_key=date_key,
        start_time=time,
        description=f"Prepare for: {assignment.title}",
        category="Study",
        color=STUDY_COLOR,
        related_assignment=assignment.id,
        duration=duration,
    )


def _single(assignments: Sequence[Event], config: StudyPlanConfig) -> List[StudyBlock]:
    return [
        _make_block(a, shift_date_key(a.date_key, -config.days_before), config.study_time, config.duration)
        for a in assignments
    ]


def _rotate(assignments: Sequence[Event], config: StudyPlanConfig) -> List[StudyBlock]:
    blocks: List[StudyBlock] = []
    daily_counts: Dict[str, int] = {}

    for assignment in assignments:
        study_date = shift_date_key(assignment.date_key, -config.days_before)
        count = daily_counts.get(study_date, 0)
        if count >= config.max_per_day:
            logger.debug("Day %s is full, no study block for %r", study_date, assignment.title)
            continue

        time = config.preferred_times[count % len(config.preferred_times)]
        blocks.append(_make_block(assignment, study_date, time, config.duration))
        daily_counts[study_date] = count + 1

    return blocks


def _budget(assignments: Sequence[Event], config: StudyPlanConfig) -> List[StudyBlock]:
    blocks: List[StudyBlock] = []
    hours_used: Dict[str, int] = {}

    # sorted() is stable: same due date keeps input order
    for assignment in sorted(assignments, key=lambda a: (a.date_key, a.start_time)):
        study_date = shift_date_key(assignment.date_key, -config.days_before)
        used = hours_used.get(study_date, 0)
        if used >= config.max_hours_per_day:
            logger.debug("Study budget for %s used up, no block for %r", study_date, assignment.title)
            continue

        times = config.preferred_times
        time = times[used] if used < len(times) else times[0]
        blocks.append(_make_block(assignment, study_date, time, "1 hour"))
        hours_used[study_date] = used + 1

    return blocks


_STRATEGY_FUNCS = {
    "single": _single,
    "rotate": _rotate,
    "budget": _budget,
}


def generate(assignments: Iterable[Event], config: StudyPlanConfig | None = None) -> List[StudyBlock]:
    """
    Derive study blocks for `assignments` according to config.strategy.
    """
    config = config or StudyPlanConfig()
    items = list(assignments)
    blocks = _STRATEGY_FUNCS[config.strategy](items, config)

    dropped = len(items) - len(blocks)
    if dropped:
        logger.debug("%d assignment(s) got no study block due to daily caps", dropped)
    logger.info("Generated %d study block(s) with strategy %r", len(blocks), config.strategy)
    return blocks


def schedule_study_blocks(store: EventStore, config: StudyPlanConfig | None = None) -> List[StudyBlock]:
    """
    Regenerate all study blocks of a store.

    Previous study blocks are removed first; completed manual assignments are
    not planned for.
    """
    assignments = [
        a for a in all_assignments(store) if not (isinstance(a, ManualAssignment) and a.completed)
    ]
    blocks = generate(assignments, config)
    store.remove_source(SourceType.STUDY_BLOCK)
    store.merge_batch(SourceType.STUDY_BLOCK, blocks)
    return blocks
