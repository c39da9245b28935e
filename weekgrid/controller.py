"""
Grid controller.

Turns user gestures into store mutations and owns the two pieces of
transient UI state:

- editor: the open EditorDraft, or None when the editor is closed
- toast:  the active notification, auto-dismissed after its duration

Gestures:
    cell_click / event_click / add_click  -> open the editor
    submit                                -> validate, create or update, close
    cancel / delete                       -> close (delete also removes)
    save / load / clear                   -> file round-trip and reset

Validation happens before any mutation; a failed submit keeps the editor open
and leaves the store untouched. Load failures never touch the store either.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from weekgrid.config import (
    DEFAULT_EVENT_END,
    DEFAULT_EVENT_START,
    PASTEL_PALETTE,
    SCHEDULE_FILENAME,
    TOAST_DURATION_MS,
)
from weekgrid.errors import NotFound, ParseError, ValidationError
from weekgrid.geometry import PlacedEvent, default_range_for_cell, visible_layout
from weekgrid.model import EditorDraft, Event, GridConfig
from weekgrid.schedule_file import deserialize, dumps
from weekgrid.store import EventStore
from weekgrid.timecodec import TimeSlot, generate_slots, parse_time_input, to_12h, to_minutes

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Toast:
    message: str
    kind: str = ERROR
    duration_ms: int = TOAST_DURATION_MS
    shown_at: float = 0.0

    def expired(self, now: float) -> bool:
        return (now - self.shown_at) * 1000 >= self.duration_ms


ToastSink = Callable[[Toast], None]
ReadFn = Callable[[], bytes]
DownloadFn = Callable[[bytes, str], None]


class GridController:
    def __init__(
        self,
        config: Optional[GridConfig] = None,
        store: Optional[EventStore] = None,
        toast_sink: Optional[ToastSink] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or GridConfig()
        self.store = store if store is not None else EventStore()
        self.editor: Optional[EditorDraft] = None
        self.toast: Optional[Toast] = None
        self._toast_sink = toast_sink
        self._clock = clock
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def notify(self, message: str, kind: str = ERROR, duration_ms: int = TOAST_DURATION_MS) -> Toast:
        toast = Toast(message=message, kind=kind, duration_ms=duration_ms, shown_at=self._clock())
        self.toast = toast
        if self._toast_sink is not None:
            self._toast_sink(toast)
        return toast

    def current_toast(self) -> Optional[Toast]:
        if self.toast is not None and self.toast.expired(self._clock()):
            self.toast = None
        return self.toast

    def dismiss_toast(self) -> None:
        self.toast = None

    # ------------------------------------------------------------------
    # Editor state
    # ------------------------------------------------------------------

    @property
    def is_editor_open(self) -> bool:
        return self.editor is not None

    def random_color(self) -> str:
        return self._rng.choice(PASTEL_PALETTE)

    def _open(self, draft: EditorDraft) -> bool:
        if self.editor is not None:
            # the editor is modal: gestures behind it are ignored
            return False
        self.editor = draft
        return True

    def cell_click(self, day: str, hour: int) -> bool:
        start, end = default_range_for_cell(hour)
        return self._open(
            EditorDraft(title="", days=[day], start_time=start, end_time=end, color=self.random_color())
        )

    def event_click(self, event_id: str) -> bool:
        ev = self.store.get(event_id)
        if ev is None:
            return False
        return self._open(EditorDraft.from_event(ev))

    def add_click(self) -> bool:
        return self._open(
            EditorDraft(
                title="",
                days=[self.config.days[0]],
                start_time=DEFAULT_EVENT_START,
                end_time=DEFAULT_EVENT_END,
                color=self.random_color(),
            )
        )

    def _require_editor(self) -> EditorDraft:
        if self.editor is None:
            raise RuntimeError("Editor is not open")
        return self.editor

    def set_title(self, title: str) -> None:
        self.editor = replace(self._require_editor(), title=title)

    def set_color(self, color: str) -> None:
        self.editor = replace(self._require_editor(), color=color)

    def set_days(self, days: list[str]) -> None:
        self.editor = replace(self._require_editor(), days=list(dict.fromkeys(days)))

    def toggle_day(self, day: str) -> None:
        """
        Select/deselect a day; the selection stays in configured day order.
        """
        draft = self._require_editor()
        if day in draft.days:
            selected = [d for d in draft.days if d != day]
        else:
            selected = draft.days + [day]
        ordered = [d for d in self.config.days if d in selected]
        # keep days that are not (or no longer) configured at the end
        ordered += [d for d in selected if d not in ordered]
        self.editor = replace(draft, days=ordered)

    def set_time(self, which: str, raw: str) -> str:
        """
        Update start or end time from free-text input.

        Unparseable input keeps the last good value. Returns the value in effect.
        """
        if which not in ("start", "end"):
            raise ValueError(f"which must be 'start' or 'end', got {which!r}")
        draft = self._require_editor()
        current = draft.start_time if which == "start" else draft.end_time

        parsed = parse_time_input(raw)
        if parsed is None:
            return current
        if parsed.ambiguous:
            logger.warning("Ambiguous time input %r read as %s", raw, parsed.value)

        if which == "start":
            self.editor = replace(draft, start_time=parsed.value)
        else:
            self.editor = replace(draft, end_time=parsed.value)
        return parsed.value

    def time_slots(self) -> list[TimeSlot]:
        return generate_slots(self.config.bounds)

    # ------------------------------------------------------------------
    # Submit / cancel / delete
    # ------------------------------------------------------------------

    def validate(self, draft: EditorDraft) -> None:
        """
        Raise ValidationError for the first failing rule:
        bounds, positive duration, at least one day, non-empty title.
        """
        bounds = self.config.bounds
        try:
            start = to_minutes(draft.start_time)
            end = to_minutes(draft.end_time)
        except ValueError as e:
            raise ValidationError(f"Invalid time: {e}") from e

        lo, hi = bounds.start_minutes, bounds.end_minutes
        if not (lo <= start <= hi and lo <= end <= hi):
            raise ValidationError(
                f"Times must be between {to_12h(f'{bounds.start_hour:02d}:00')} "
                f"and {to_12h(f'{bounds.end_hour:02d}:00')}."
            )
        if end <= start:
            raise ValidationError("End time must be after start time.")
        if not draft.days:
            raise ValidationError("Select at least one day.")
        if not isinstance(draft.title, str) or not draft.title.strip():
            raise ValidationError("Please enter a title.")

    def submit(self) -> Optional[list[Event]]:
        """
        Commit the open draft. Returns the stored events, or None if the
        draft was rejected (the editor then stays open).
        """
        draft = self._require_editor()
        try:
            self.validate(draft)
        except ValidationError as e:
            self.notify(str(e), ERROR)
            return None

        draft = replace(draft, title=draft.title.strip())
        if draft.is_edit:
            try:
                result = self.store.update(draft.editing_event_id, draft)
            except NotFound as e:
                logger.warning("%s, reopening editor as a new event", e)
                self.editor = replace(draft, editing_event_id=None)
                self.notify("This event no longer exists. Submit again to add it as a new event.", ERROR)
                return None
        else:
            result = self.store.create(draft)

        self.editor = None
        return result

    def cancel(self) -> None:
        self.editor = None

    def delete(self) -> None:
        draft = self.editor
        if draft is not None and draft.editing_event_id is not None:
            self.store.delete(draft.editing_event_id)
        self.editor = None

    # ------------------------------------------------------------------
    # Save / load / clear
    # ------------------------------------------------------------------

    def save(self, download: DownloadFn) -> bool:
        try:
            download(dumps(self.store), SCHEDULE_FILENAME)
        except OSError as e:
            logger.error("Saving schedule failed: %s", e)
            self.notify(f"Could not save schedule: {e}", ERROR)
            return False
        self.notify("Schedule saved.", SUCCESS)
        return True

    def load(self, read: ReadFn) -> bool:
        """
        Replace the schedule with the content read from a file.
        On any failure the current schedule stays as it is.
        """
        try:
            data = read()
        except OSError as e:
            logger.error("Reading schedule failed: %s", e)
            self.notify(f"Could not read file: {e}", ERROR)
            return False

        try:
            events = deserialize(data, id_factory=self.store.new_id)
        except ParseError as e:
            logger.error("%s", e)
            self.notify("Invalid schedule file.", ERROR)
            return False

        self.store.replace_all(events)
        self.editor = None
        self.notify(f"Loaded {len(events)} events.", SUCCESS)
        return True

    def clear(self) -> None:
        self.store.clear()
        self.editor = None
        self.notify("Schedule cleared.", SUCCESS)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def visible_layout(self) -> list[PlacedEvent]:
        return visible_layout(self.store, self.config.days, self.config.bounds)
