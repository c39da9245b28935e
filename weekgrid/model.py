"""
Central data model definitions used across the project.

This module defines the canonical structure of Event, EditorDraft and the
grid configuration so that:
- all modules share the same field names
- the JSON file format (camelCase keys) is mapped in exactly one place
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from weekgrid.config import DEFAULT_DAYS, DEFAULT_END_HOUR, DEFAULT_START_HOUR


@dataclass
class Event:
    """
    One timed block on one day of the grid.

    A multi-day entry in the editor is stored as several Events,
    one per day, each with its own event_id.
    """

    event_id: str
    title: str
    day: str
    start_time: str
    end_time: str
    color: str

    def to_dict(self, include_id: bool = True) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if include_id:
            out["id"] = self.event_id
        out["title"] = self.title
        out["day"] = self.day
        out["startTime"] = self.start_time
        out["endTime"] = self.end_time
        out["color"] = self.color
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any], event_id: str) -> "Event":
        """
        Build an Event from a loaded record without coercing or validating
        its fields. Missing keys become None.
        """
        return cls(
            event_id=event_id,
            title=raw.get("title"),
            day=raw.get("day"),
            start_time=raw.get("startTime"),
            end_time=raw.get("endTime"),
            color=raw.get("color"),
        )

    def with_changes(self, **changes: Any) -> "Event":
        return replace(self, **changes)


@dataclass(frozen=True)
class ScheduleBounds:
    """
    Hour range of the grid; also the valid range for event times.
    """

    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR

    def __post_init__(self) -> None:
        if not (0 <= self.start_hour <= 24 and 0 <= self.end_hour <= 24):
            raise ValueError(f"Hours must be within 0..24, got {self.start_hour}..{self.end_hour}")
        if self.start_hour >= self.end_hour:
            raise ValueError(f"start_hour must be before end_hour, got {self.start_hour}..{self.end_hour}")

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60

    def hours(self) -> list[int]:
        # the last hour gets its own row
        return list(range(self.start_hour, self.end_hour + 1))


@dataclass
class GridConfig:
    days: list[str] = field(default_factory=lambda: list(DEFAULT_DAYS))
    bounds: ScheduleBounds = field(default_factory=ScheduleBounds)

    def __post_init__(self) -> None:
        if not self.days:
            raise ValueError("At least one day label is required")
        if len(set(self.days)) != len(self.days):
            raise ValueError(f"Day labels must be distinct: {self.days}")


@dataclass
class EditorDraft:
    """
    In-progress form state of the event editor.

    Never stored directly: the controller validates it and hands it
    to the EventStore, which materializes one Event per selected day.
    """

    title: str
    days: list[str]
    start_time: str
    end_time: str
    color: str
    editing_event_id: Optional[str] = None

    @property
    def is_edit(self) -> bool:
        return self.editing_event_id is not None

    @classmethod
    def from_event(cls, event: Event) -> "EditorDraft":
        return cls(
            title=event.title,
            days=[event.day],
            start_time=event.start_time,
            end_time=event.end_time,
            color=event.color,
            editing_event_id=event.event_id,
        )
