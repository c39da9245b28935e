"""
In-memory event store.

The store owns the ordered list of events. A single editor submit may touch
several days, so create/update "fan out" one draft into one Event per day:

    create: every day gets a fresh id
    update: the edited event keeps its id and moves to days[0],
            every further day gets a fresh id

Updates replace the old record in one slice assignment, so callers never see
a half-applied edit.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Iterable, Iterator, Optional, Union

from weekgrid.errors import NotFound
from weekgrid.model import EditorDraft, Event

logger = logging.getLogger(__name__)


def new_event_id() -> str:
    return uuid.uuid4().hex


class EventStore:
    def __init__(self, id_factory: Callable[[], str] = new_event_id) -> None:
        self._events: list[Event] = []
        self.new_id = id_factory

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def get(self, event_id: str) -> Optional[Event]:
        for ev in self._events:
            if ev.event_id == event_id:
                return ev
        return None

    def _index_of(self, event_id: str) -> int:
        for i, ev in enumerate(self._events):
            if ev.event_id == event_id:
                return i
        return -1

    def _materialize(self, draft: EditorDraft, first_id: Optional[str] = None) -> list[Event]:
        out: list[Event] = []
        for i, day in enumerate(draft.days):
            event_id = first_id if (i == 0 and first_id is not None) else self.new_id()
            out.append(
                Event(
                    event_id=event_id,
                    title=draft.title,
                    day=day,
                    start_time=draft.start_time,
                    end_time=draft.end_time,
                    color=draft.color,
                )
            )
        return out

    def create(self, draft: EditorDraft) -> list[Event]:
        """
        Add one event per day of the draft. Returns the created events.
        """
        created = self._materialize(draft)
        self._events.extend(created)
        logger.debug("Created %d event(s) %r on %s", len(created), draft.title, draft.days)
        return created

    def update(self, event_id: str, draft: EditorDraft) -> list[Event]:
        """
        Apply an edit to an existing event.

        Raises NotFound if event_id is not in the store, ValueError if the
        draft has no day to move the event to.
        """
        idx = self._index_of(event_id)
        if idx < 0:
            raise NotFound(event_id)
        if not draft.days:
            raise ValueError("An updated event needs at least one day")

        records = self._materialize(draft, first_id=event_id)
        self._events[idx : idx + 1] = records
        logger.debug("Updated event %s -> %d record(s) on %s", event_id, len(records), draft.days)
        return records

    def delete(self, event_id: str) -> bool:
        """
        Remove an event. Removing an unknown id is a no-op.
        Returns True if something was removed.
        """
        idx = self._index_of(event_id)
        if idx < 0:
            logger.debug("Delete ignored, no event %s", event_id)
            return False
        del self._events[idx]
        logger.debug("Deleted event %s", event_id)
        return True

    def replace_all(self, events: Iterable[Union[Event, dict[str, Any]]]) -> None:
        """
        Swap the whole event set (used by load).

        Raw dicts are accepted as-is; anything without an id gets a fresh one.
        """
        incoming: list[Event] = []
        for item in events:
            if isinstance(item, Event):
                ev = item if item.event_id else item.with_changes(event_id=self.new_id())
            else:
                ev = Event.from_dict(item, event_id=item.get("id") or self.new_id())
            incoming.append(ev)
        self._events = incoming
        logger.debug("Replaced event set (%d events)", len(incoming))

    def clear(self) -> None:
        self._events = []
