"""
Grid geometry.

Every event is drawn once, in the cell of its day and starting hour.
Its vertical position is a fraction of that one-hour cell:

    top    = start minute / 60
    height = duration in minutes / 60   (may exceed 1.0, never clipped)

Overflow into the following rows is left to the rendering sink.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from weekgrid.model import Event, ScheduleBounds
from weekgrid.timecodec import to_12h, to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotLayout:
    top_fraction: float
    height_fraction: float


@dataclass(frozen=True)
class PlacedEvent:
    event: Event
    column: int
    hour: int
    layout: SlotLayout
    time_label: str


def layout(event: Event) -> SlotLayout:
    """
    Position of an event inside its starting hour cell.
    Raises ValueError if the event's times are malformed.
    """
    start = to_minutes(event.start_time)
    end = to_minutes(event.end_time)
    return SlotLayout(top_fraction=(start % 60) / 60, height_fraction=(end - start) / 60)


def default_range_for_cell(hour: int) -> tuple[str, str]:
    """
    Time range proposed when clicking an empty cell.

    The terminal 24 row proposes 24:00-24:00, a zero-length range the user
    has to fix before the editor accepts it.
    """
    if hour >= 24:
        return "24:00", "24:00"
    return f"{hour:02d}:00", f"{min(hour + 1, 24):02d}:00"


def start_hour(event: Event) -> int:
    return to_minutes(event.start_time) // 60


def cell_membership(event: Event, day: str, hour: int) -> bool:
    """
    True if the event is drawn in cell (day, hour), i.e. it starts in that hour.
    """
    if event.day != day:
        return False
    try:
        return start_hour(event) == hour
    except ValueError:
        return False


def time_label(event: Event) -> str:
    return f"{to_12h(event.start_time)} - {to_12h(event.end_time)}"


def visible_layout(events: Iterable[Event], days: list[str], bounds: ScheduleBounds) -> list[PlacedEvent]:
    """
    Compute the placement of every event that shows up on the grid.

    Events on unknown days or outside the rendered hour rows are skipped.
    Events with malformed times (e.g. from a hand-edited file) are skipped
    with a warning instead of breaking the whole grid.
    """
    columns = {day: i for i, day in enumerate(days)}
    rows = set(bounds.hours())

    placed: list[PlacedEvent] = []
    for ev in events:
        column = columns.get(ev.day) if isinstance(ev.day, str) else None
        if column is None:
            continue
        try:
            geom = layout(ev)
            hour = start_hour(ev)
            label = time_label(ev)
        except ValueError as e:
            logger.warning("Skipping event %s (%r): %s", ev.event_id, ev.title, e)
            continue
        if hour not in rows:
            continue
        placed.append(PlacedEvent(event=ev, column=column, hour=hour, layout=geom, time_label=label))
    return placed
