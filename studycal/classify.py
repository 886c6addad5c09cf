"""
Keyword classification of calendar events.

Two independent checks live here:

- classify(): assigns a display category + color using an ordered rule
  table. The FIRST matching rule wins, so "Math Homework" is a class,
  not an assignment.
- is_canvas_like(): flags items that look like LMS assignments even though
  they arrived through a generic calendar source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


# Reserved calendar color id used to mark assignment blocks ("Tomato" red)
CANVAS_COLOR_MARKER = "11"

CANVAS_KEYWORDS: Tuple[str, ...] = ("assignment", "homework", "quiz", "essay", "project", "hw", "paper")


@dataclass(frozen=True)
class Classification:
    category: str
    color: str


@dataclass(frozen=True)
class Rule:
    keywords: Tuple[str, ...]
    category: str
    color: str

    def matches(self, text: str) -> bool:
        return any(k in text for k in self.keywords)


CATEGORY_RULES: Tuple[Rule, ...] = (
    Rule(("hon", "humanities", "math", "calculus", "physics", "spanish"), "Classes", "#1e88e5"),
    Rule(("cross country", "ath", "practice"), "Sports/Activities", "#43a047"),
    Rule(("meeting", "chapel", "advisor"), "Meetings/Chapel/Advisory", "#fdd835"),
    Rule(("homework", "test", "quiz", "essay", "project"), "Assignments/Tests", "#e53935"),
)

DEFAULT_CLASSIFICATION = Classification("Other", "#9e9e9e")


def classify(title: Optional[str], description: Optional[str] = "") -> Classification:
    """
    Return the category of the first rule whose keywords appear in the
    title (case-insensitive). Never fails.

    The description is accepted but not matched: short keywords such as
    "hon" or "ath" hit too many ordinary words in free text.
    """
    text = (title or "").lower()
    for rule in CATEGORY_RULES:
        if rule.matches(text):
            return Classification(rule.category, rule.color)
    return DEFAULT_CLASSIFICATION


def is_canvas_like(
    title: Optional[str],
    description: Optional[str] = "",
    color_marker: Optional[str] = None,
) -> bool:
    """
    True if the item is most likely an LMS assignment.

    The color marker decides first; keywords are only the fallback.
    """
    if color_marker == CANVAS_COLOR_MARKER:
        return True
    text = f"{title or ''} {description or ''}".lower()
    return any(k in text for k in CANVAS_KEYWORDS)
