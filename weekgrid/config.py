"""
Configuration constants.

The surrounding application (CLI flags, interactive mode) may override the
day list and the hour bounds; everything else is fixed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

DEFAULT_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri"]
DEFAULT_START_HOUR = 5
DEFAULT_END_HOUR = 23

SLOT_STEP_MINUTES = 30

# ---------------------------------------------------------------------------
# Editor defaults
# ---------------------------------------------------------------------------

DEFAULT_EVENT_START = "09:00"
DEFAULT_EVENT_END = "10:00"

PASTEL_PALETTE = [
    "#FFB3BA",
    "#FFDFBA",
    "#FFFFBA",
    "#BAFFC9",
    "#BAE1FF",
    "#D7BAFF",
    "#FFC8DD",
    "#C1F0F6",
]

# ---------------------------------------------------------------------------
# Notifications & files
# ---------------------------------------------------------------------------

TOAST_DURATION_MS = 4000

SCHEDULE_FILENAME = "schedule.json"
SCHEDULE_SUFFIX = ".json"


def default_schedule_path() -> Path:
    """
    Return the default schedule file in the current working directory.

    A function instead of a constant so tests and the CLI can resolve it lazily.
    """
    return Path.cwd() / SCHEDULE_FILENAME


def parse_days(value: str | Iterable[str]) -> list[str]:
    """
    Normalize a day list ("Mon, Tue,Wed" or an iterable of labels).

    Labels are stripped, empty entries dropped and duplicates removed
    (first occurrence wins). Raises ValueError if nothing is left.
    """
    raw = value.split(",") if isinstance(value, str) else list(value)
    out: list[str] = []
    for item in raw:
        label = str(item).strip()
        if label and label not in out:
            out.append(label)
    if not out:
        raise ValueError("At least one day label is required")
    return out
