"""
Time conversions.

All event times are naive 24-hour wall-clock strings "HH:MM".
"24:00" is the only value with hour 24 and means end-of-day.

Conversions:
    "HH:MM"  <->  minutes since midnight
    "HH:MM"   ->  "h:MM AM/PM" display text
    free text ->  "HH:MM" (best effort, never raises)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from weekgrid.config import SLOT_STEP_MINUTES
from weekgrid.model import ScheduleBounds

_NON_INPUT_CHARS = re.compile(r"[^a-z0-9:]")
_LETTERS = re.compile(r"[a-z]")
_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class ParsedTime:
    """
    Result of parsing free-text time input.

    ambiguous: a two-digit number >= 24 ("45") was read as an hour and clamped.
    clamped:   hour or minute was out of range and silently clamped.
    """

    value: str
    ambiguous: bool = False
    clamped: bool = False


@dataclass(frozen=True)
class TimeSlot:
    value: str
    label: str


def to_minutes(hhmm: str) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.
    Raises ValueError for invalid formats.
    """
    if not isinstance(hhmm, str):
        raise ValueError(f"Invalid time format: {hhmm!r}")
    parts = hhmm.strip().split(":")
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise ValueError(f"Invalid time format: {hhmm!r}")
    h = int(parts[0])
    m = int(parts[1])
    if not (0 <= h <= 24 and 0 <= m <= 59) or (h == 24 and m != 0):
        raise ValueError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def from_minutes(total: int) -> str:
    """
    Convert minutes since midnight back to 'HH:MM'.
    """
    if not 0 <= total <= 24 * 60:
        raise ValueError(f"Minutes out of range: {total}")
    h, m = divmod(total, 60)
    return f"{h:02d}:{m:02d}"


def to_12h(hhmm: str) -> str:
    """
    Display text for a 24h time: '09:30' -> '9:30 AM', '24:00' -> '12:00 AM'.
    """
    h, m = divmod(to_minutes(hhmm), 60)
    if h in (0, 24):
        return f"12:{m:02d} AM"
    if h == 12:
        return f"12:{m:02d} PM"
    suffix = "PM" if h > 12 else "AM"
    return f"{h % 12}:{m:02d} {suffix}"


def format_hour(hour: int) -> str:
    """
    Row label of an hour in the grid (13 -> '1:00 PM').
    """
    return to_12h(f"{hour:02d}:00")


def _bounded_int(digits: str, width: int = 4) -> int:
    """
    int() of a digit run. Runs wider than `width` significant digits return
    10**width: they are clamped later anyway, and int() refuses very long strings.
    """
    digits = digits.lstrip("0") or "0"
    if len(digits) > width:
        return 10**width
    return int(digits)


def _leading_int(text: str) -> int:
    match = _DIGITS.match(text)
    return _bounded_int(match.group()) if match else 0


def parse_time_input(raw: str) -> Optional[ParsedTime]:
    """
    Parse loose user input into 'HH:MM'.

    Accepted forms: "9", "930", "9:30", "14:00", "2pm", "2:30pm".
    Returns None only if the input contains no digit at all.
    Out-of-range values are clamped (hour <= 23, minute <= 59), never rejected.
    """
    clean = _NON_INPUT_CHARS.sub("", (raw or "").strip().lower())
    if not any(ch.isdigit() for ch in clean):
        return None

    is_pm = "p" in clean
    is_am = "a" in clean
    numbers = _LETTERS.sub("", clean)

    ambiguous = False
    if ":" in numbers:
        hour_text, minute_text = numbers.split(":")[:2]
        h = _leading_int(hour_text)
        m = _leading_int(minute_text)
    else:
        num = _bounded_int(numbers)
        if num < 24:
            h, m = num, 0
        elif num < 100:
            # "45" is read as an hour, not as minutes of some hour
            h, m = num, 0
            ambiguous = True
        else:
            # last two digits are minutes, the rest is the hour
            h, m = _bounded_int(numbers[:-2]), int(numbers[-2:])

    if is_pm and h < 12:
        h += 12
    if is_am and h == 12:
        h = 0

    clamped = h > 23 or m > 59
    h = min(h, 23)
    m = min(m, 59)

    return ParsedTime(value=f"{h:02d}:{m:02d}", ambiguous=ambiguous, clamped=clamped)


def parse_free_text(raw: str) -> Optional[str]:
    parsed = parse_time_input(raw)
    return parsed.value if parsed else None


def generate_slots(bounds: ScheduleBounds) -> list[TimeSlot]:
    """
    Suggestions for the time dropdown: every 30 minutes within the bounds,
    both ends inclusive, never past 24:00.
    """
    slots: list[TimeSlot] = []
    for total in range(bounds.start_minutes, bounds.end_minutes + 1, SLOT_STEP_MINUTES):
        h, m = divmod(total, 60)
        if h > 24 or (h == 24 and m > 0):
            continue
        value = f"{h:02d}:{m:02d}"
        slots.append(TimeSlot(value=value, label=to_12h(value)))
    return slots
