from __future__ import annotations

from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.markup import escape

from weekgrid.cli import download_to_fn, read_file_fn
from weekgrid.config import SCHEDULE_SUFFIX, parse_days
from weekgrid.conflicts import find_conflicts
from weekgrid.controller import GridController
from weekgrid.render import build_event_list_table, build_grid_table, event_line
from weekgrid.timecodec import to_12h

console = Console()

Prompt = Callable[[str], str]


def _println(msg: str = "") -> None:
    console.print(msg)


def _ask(prompt: Prompt, msg: str) -> str:
    return prompt(escape(msg))


def _safe_12h(hhmm: str) -> str:
    try:
        return to_12h(hhmm)
    except ValueError:
        return str(hhmm)


def run_interactive(controller: GridController, path: Path, prompt: Prompt = console.input) -> None:
    """
    Interactive menu loop driving the grid controller.
    Changes stay in memory until the user saves.
    """
    while True:
        _print_header(controller, path)

        choice = _ask(
            prompt,
            "\n[1] Show week grid\n"
            "[2] Add event\n"
            "[3] Click a cell (day + hour)\n"
            "[4] Edit / delete an event\n"
            "[5] Save\n"
            "[6] Load\n"
            "[7] Clear all events\n"
            "[8] Show conflicts\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_show(controller)
        elif choice == "2":
            controller.add_click()
            _flow_editor(controller, prompt)
        elif choice == "3":
            _flow_cell_click(controller, prompt)
        elif choice == "4":
            _flow_edit(controller, prompt)
        elif choice == "5":
            path = _flow_save(controller, path, prompt)
        elif choice == "6":
            path = _flow_load(controller, path, prompt)
        elif choice == "7":
            _flow_clear(controller, prompt)
        elif choice == "8":
            _flow_conflicts(controller)
        else:
            _println("Invalid choice.")


def _print_header(controller: GridController, path: Path) -> None:
    bounds = controller.config.bounds
    _println("\n=== WeekGrid (interactive) ===")
    _println(
        f"File: {escape(str(path))} | days: {', '.join(controller.config.days)} | "
        f"hours: {bounds.start_hour}-{bounds.end_hour} | events: {len(controller.store)}"
    )


def _flow_show(controller: GridController) -> None:
    console.print(build_grid_table(controller.visible_layout(), controller.config))


def _pick_day(controller: GridController, prompt: Prompt) -> str | None:
    days = controller.config.days
    for i, day in enumerate(days, start=1):
        _println(f"{i}) {day}")
    pick = _ask(prompt, "Day number [blank = back]: ").strip()
    if not pick:
        return None
    if not pick.isdigit() or not (1 <= int(pick) <= len(days)):
        _println("Out of range.")
        return None
    return days[int(pick) - 1]


def _flow_cell_click(controller: GridController, prompt: Prompt) -> None:
    day = _pick_day(controller, prompt)
    if day is None:
        return
    hours = controller.config.bounds.hours()
    pick = _ask(prompt, f"Hour ({hours[0]}-{hours[-1]}): ").strip()
    if not pick.isdigit() or int(pick) not in hours:
        _println("Out of range.")
        return
    controller.cell_click(day, int(pick))
    _flow_editor(controller, prompt)


def _flow_edit(controller: GridController, prompt: Prompt) -> None:
    events = controller.store.events
    if not events:
        _println("No events.")
        return
    console.print(build_event_list_table(events, title="Pick an event"))
    pick = _ask(prompt, "Enter number to edit [blank = back]: ").strip()
    if not pick:
        return
    if not pick.isdigit():
        _println("Not a number.")
        return
    i = int(pick)
    if not (1 <= i <= len(events)):
        _println("Out of range.")
        return
    controller.event_click(events[i - 1].event_id)
    _flow_editor(controller, prompt)


def _flow_editor(controller: GridController, prompt: Prompt) -> None:
    """
    Form for the open draft. Every prompt shows the current value;
    blank input keeps it. Loops until the draft is submitted, cancelled or deleted.
    """
    while controller.editor is not None:
        draft = controller.editor
        heading = "Edit event" if draft.is_edit else "New event"
        _println(f"\n--- {heading} ---")

        title = _ask(prompt, f"Title [{draft.title}]: ").strip()
        if title:
            controller.set_title(title)

        days_in = _ask(prompt, f"Days [{', '.join(map(str, draft.days))}]: ").strip()
        if days_in:
            try:
                days = parse_days(days_in)
            except ValueError as e:
                _println(escape(str(e)))
            else:
                unknown = [d for d in days if d not in controller.config.days]
                if unknown:
                    _println(f"Unknown day(s): {escape(', '.join(unknown))}")
                else:
                    controller.set_days(days)

        for which, current in (("start", draft.start_time), ("end", draft.end_time)):
            raw = _ask(prompt, f"{which.capitalize()} time [{_safe_12h(current)}] (? = suggestions): ").strip()
            if raw == "?":
                labels = [slot.label for slot in controller.time_slots()]
                _println(", ".join(labels))
                raw = _ask(prompt, f"{which.capitalize()} time [{_safe_12h(current)}]: ").strip()
            if raw:
                value = controller.set_time(which, raw)
                _println(f"{which.capitalize()}: {_safe_12h(value)}")

        color = _ask(prompt, f"Color [{draft.color}]: ").strip()
        if color:
            controller.set_color(color)

        options = "[Y]es / [n]o, cancel"
        if draft.is_edit:
            options += " / [d]elete"
        action = _ask(prompt, f"Save event? {options}: ").strip().lower()

        if action == "n":
            controller.cancel()
            _println("Cancelled.")
        elif action == "d" and draft.is_edit:
            controller.delete()
            _println("Deleted.")
        else:
            stored = controller.submit()
            if stored is not None:
                for ev in stored:
                    _println(f"Saved: {escape(event_line(ev))}")


def _ask_path(current: Path, prompt: Prompt) -> Path:
    raw = _ask(prompt, f"File [{current}]: ").strip()
    out = Path(raw).expanduser() if raw else current
    if out.suffix.lower() != SCHEDULE_SUFFIX:
        out = out.with_suffix(SCHEDULE_SUFFIX)
    return out


def _flow_save(controller: GridController, path: Path, prompt: Prompt) -> Path:
    out = _ask_path(path, prompt)
    if controller.save(download_to_fn(out)):
        _println(f"Saved to: {escape(str(out.resolve()))}")
        return out
    return path


def _flow_load(controller: GridController, path: Path, prompt: Prompt) -> Path:
    src = _ask_path(path, prompt)
    if controller.load(read_file_fn(src)):
        return src
    return path


def _flow_clear(controller: GridController, prompt: Prompt) -> None:
    sure = _ask(prompt, "Remove all events? [y/N]: ").strip().lower()
    if sure == "y":
        controller.clear()


def _flow_conflicts(controller: GridController) -> None:
    confs = find_conflicts(controller.store)
    if not confs:
        _println("No conflicts found.")
        return
    _println(f"Conflicts found: {len(confs)}")
    for k, (a, b) in enumerate(confs, start=1):
        _println(f"{k}. {escape(event_line(a))}  <->  {escape(event_line(b))}")
