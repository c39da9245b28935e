"""
Error taxonomy.

- ValidationError: user-correctable editor input (bounds, duration, days, title)
- ParseError: a schedule file that cannot be loaded
- NotFound: an event id that vanished from the store

None of them is fatal: the controller turns them into toasts,
the CLI prints them and exits with a nonzero code.
"""

from __future__ import annotations


class WeekGridError(Exception):
    """Base class for all weekgrid errors."""


class ValidationError(WeekGridError, ValueError):
    pass


class ParseError(WeekGridError, ValueError):
    pass


class NotFound(WeekGridError, LookupError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id!r}")
        self.event_id = event_id
