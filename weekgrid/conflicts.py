"""
Conflict detection.

Given the events of the week, detect overlaps on the same day.
Overlap rule:
    start < other_end AND end > other_start
"""

from __future__ import annotations

from typing import Iterable

from weekgrid.model import Event
from weekgrid.timecodec import to_minutes


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # touching endpoints (end == start) do not overlap
    return a_start < b_end and a_end > b_start


def find_conflicts(events: Iterable[Event]) -> list[tuple[Event, Event]]:
    """
    Find overlapping event pairs (A,B), each pair appears once (i<j).
    Overlap only if same day AND time intervals overlap.
    """
    conflicts: list[tuple[Event, Event]] = []

    # Pre-parse times, skipping anything that would not render anyway
    parsed: list[tuple[str, int, int, Event]] = []
    for ev in events:
        if not isinstance(ev.day, str) or not ev.day:
            continue
        try:
            start = to_minutes(ev.start_time)
            end = to_minutes(ev.end_time)
        except ValueError:
            continue
        if end <= start:
            continue
        parsed.append((ev.day, start, end, ev))

    # O(n^2) is fine for a week of events
    for i in range(len(parsed)):
        d1, s1, e1, ev1 = parsed[i]
        for j in range(i + 1, len(parsed)):
            d2, s2, e2, ev2 = parsed[j]
            if d1 != d2:
                continue
            if _overlaps(s1, e1, s2, e2):
                conflicts.append((ev1, ev2))

    return conflicts


def conflicting_ids(events: Iterable[Event]) -> set[str]:
    out: set[str] = set()
    for a, b in find_conflicts(events):
        out.add(a.event_id)
        out.add(b.event_id)
    return out
