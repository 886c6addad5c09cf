"""
Exceptions raised by studycal.

Callers (mainly the CLI) catch StudyCalError and decide how to recover,
e.g. falling back to the sample feed after a ParseError.
"""

from __future__ import annotations


class StudyCalError(Exception):
    """Base class for all studycal errors."""


class ParseError(StudyCalError):
    """Feed text could not be decoded into any event blocks."""


class MergeError(StudyCalError):
    """A batch handed to the store does not match its declared source."""


class ValidationError(StudyCalError):
    """User or configuration input is missing or malformed."""


class FetchError(StudyCalError):
    """Downloading a feed or proxy document failed."""
