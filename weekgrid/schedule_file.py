"""
Schedule file format (JSON).

    {
      "events": [
        {"title": "...", "day": "Mon", "startTime": "09:00", "endTime": "10:00", "color": "#BAE1FF"},
        ...
      ]
    }

Event ids are runtime-only identity: they are left out on save and
regenerated on load. Individual records are not validated on load;
malformed ones are logged and simply fail to render.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Union

from weekgrid.errors import ParseError
from weekgrid.model import Event
from weekgrid.store import new_event_id
from weekgrid.timecodec import to_minutes

logger = logging.getLogger(__name__)

_RECORD_KEYS = ("title", "day", "startTime", "endTime", "color")


def serialize(events: Iterable[Event]) -> dict[str, Any]:
    return {"events": [ev.to_dict(include_id=False) for ev in events]}


def dumps(events: Iterable[Event]) -> bytes:
    text = json.dumps(serialize(events), indent=2, ensure_ascii=False)
    return text.encode("utf-8")


def _record_problems(record: dict[str, Any]) -> list[str]:
    problems: list[str] = []
    for key in _RECORD_KEYS:
        if not isinstance(record.get(key), str):
            problems.append(f"{key} missing or not a string")
    for key in ("startTime", "endTime"):
        value = record.get(key)
        if isinstance(value, str):
            try:
                to_minutes(value)
            except ValueError:
                problems.append(f"{key} {value!r} is not HH:MM")
    return problems


def deserialize(
    data: Union[bytes, str],
    id_factory: Callable[[], str] = new_event_id,
) -> list[Event]:
    """
    Parse a schedule document into events with fresh ids.

    Raises ParseError for undecodable/invalid JSON (including nesting or
    numbers too large to decode) or a wrong top-level shape.
    """
    try:
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        doc = json.loads(text)
    except (ValueError, RecursionError) as e:
        # ValueError covers bad UTF-8, bad JSON and over-long integer literals
        raise ParseError(f"Invalid schedule file: {e}") from e

    if not isinstance(doc, dict):
        raise ParseError("Invalid schedule file: top level must be an object")
    records = doc.get("events")
    if not isinstance(records, list):
        raise ParseError("Invalid schedule file: 'events' must be a list")

    events: list[Event] = []
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise ParseError(f"Invalid schedule file: event #{i + 1} is not an object")
        problems = _record_problems(record)
        if problems:
            logger.warning("Loaded event #%d looks malformed: %s", i + 1, "; ".join(problems))
        events.append(Event.from_dict(record, event_id=id_factory()))
    return events


def save_schedule(events: Iterable[Event], path: str | Path) -> Path:
    """
    Write the schedule to a JSON file, creating parent directories if needed.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(dumps(events))
    return out


def load_schedule(path: str | Path, id_factory: Callable[[], str] = new_event_id) -> list[Event]:
    """
    Read a schedule file. OSError (e.g. missing file) propagates,
    a malformed document raises ParseError.
    """
    return deserialize(Path(path).read_bytes(), id_factory=id_factory)
