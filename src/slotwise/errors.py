"""Input validation errors raised at the ranking boundary."""

from __future__ import annotations


class SlotwiseError(ValueError):
    """Base class for caller-input errors."""


class InvalidDuration(SlotwiseError):
    """Task duration is zero or negative."""


class InvalidRange(SlotwiseError):
    """A 1-5 scale value (priority or energy level) is out of range."""


class InvalidLookahead(SlotwiseError):
    """Lookahead window is negative."""
