"""
CLI (Command Line Interface).

Quick terminal commands operating on one schedule file, e.g.:

    weekgrid show
    weekgrid add --title "Deep work" --days Mon,Wed --start 9 --end 11:30
    weekgrid edit 2 --days Tue,Thu
    weekgrid remove 3
    weekgrid conflicts
    weekgrid print --out week.txt
    weekgrid interactive

Global options select the file (--file, default ./schedule.json) and the grid
(--grid-days, --start-hour, --end-hour). A missing file is an empty schedule.

Note:
- Every mutation goes through GridController (validation + multi-day fan-out)
- The interactive UI lives in weekgrid/interactive.py
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from weekgrid.config import DEFAULT_DAYS, DEFAULT_END_HOUR, DEFAULT_START_HOUR, default_schedule_path, parse_days
from weekgrid.conflicts import find_conflicts
from weekgrid.controller import SUCCESS, GridController, Toast
from weekgrid.model import GridConfig, ScheduleBounds
from weekgrid.render import build_event_list_table, build_grid_table, event_line, export_text
from weekgrid.timecodec import parse_free_text

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def print_toast(toast: Toast) -> None:
    style = "green" if toast.kind == SUCCESS else "red"
    console.print(f"[{style}]{escape(toast.message)}[/]")


def read_file_fn(path: Path) -> Callable[[], bytes]:
    return path.read_bytes


def download_to_fn(path: Path) -> Callable[[bytes, str], None]:
    """
    The CLI's "download": write the bytes to the chosen file, whatever the
    suggested filename is.
    """

    def _download(data: bytes, _filename: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    return _download


def open_schedule(path: Path, config: GridConfig) -> Optional[GridController]:
    """
    Build a controller and load the schedule file into it.

    Returns None if the file exists but cannot be loaded.
    """
    controller = GridController(config=config, toast_sink=print_toast)
    if not path.exists():
        logger.debug("No schedule at %s, starting empty", path)
        return controller
    if not controller.load(read_file_fn(path)):
        return None
    # the load toast is noise for one-shot commands
    controller.dismiss_toast()
    return controller


def _check_days(days_arg: str, config: GridConfig) -> Optional[list[str]]:
    try:
        days = parse_days(days_arg)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        return None
    unknown = [d for d in days if d not in config.days]
    if unknown:
        console.print(f"[red]Unknown day(s): {', '.join(unknown)} (configured: {', '.join(config.days)})[/]")
        return None
    return days


def _apply_fields(controller: GridController, args: argparse.Namespace) -> bool:
    """
    Copy the optional --title/--days/--start/--end/--color flags into the open draft.
    """
    if args.title is not None:
        controller.set_title(args.title)
    if args.days is not None:
        days = _check_days(args.days, controller.config)
        if days is None:
            return False
        controller.set_days(days)
    for which, raw in (("start", args.start), ("end", args.end)):
        if raw is None:
            continue
        if parse_free_text(raw) is None:
            console.print(f"[red]Cannot read {which} time: {raw!r}[/]")
            return False
        controller.set_time(which, raw)
    if args.color is not None:
        controller.set_color(args.color)
    return True


def _pick_event_id(controller: GridController, number: int) -> Optional[str]:
    events = controller.store.events
    if not (1 <= number <= len(events)):
        console.print(f"[red]No event #{number} (schedule has {len(events)} events).[/]")
        return None
    return events[number - 1].event_id


def _cmd_show(controller: GridController) -> int:
    console.print(build_grid_table(controller.visible_layout(), controller.config))
    return 0


def _cmd_list(controller: GridController) -> int:
    events = controller.store.events
    if not events:
        console.print("No events.")
        return 0
    console.print(build_event_list_table(events))
    return 0


def _cmd_add(args: argparse.Namespace, controller: GridController, path: Path) -> int:
    controller.add_click()
    if not _apply_fields(controller, args):
        return 1
    created = controller.submit()
    if created is None:
        return 1
    controller.save(download_to_fn(path))
    for ev in created:
        console.print(f"Added: {escape(event_line(ev))}")
    return 0


def _cmd_edit(args: argparse.Namespace, controller: GridController, path: Path) -> int:
    event_id = _pick_event_id(controller, args.number)
    if event_id is None:
        return 1
    controller.event_click(event_id)
    if not _apply_fields(controller, args):
        return 1
    updated = controller.submit()
    if updated is None:
        return 1
    controller.save(download_to_fn(path))
    for ev in updated:
        console.print(f"Saved: {escape(event_line(ev))}")
    return 0


def _cmd_remove(args: argparse.Namespace, controller: GridController, path: Path) -> int:
    event_id = _pick_event_id(controller, args.number)
    if event_id is None:
        return 1
    ev = controller.store.get(event_id)
    controller.event_click(event_id)
    controller.delete()
    controller.save(download_to_fn(path))
    if ev is not None:
        console.print(f"Removed: {escape(event_line(ev))}")
    return 0


def _cmd_clear(controller: GridController, path: Path) -> int:
    controller.clear()
    controller.save(download_to_fn(path))
    return 0


def _cmd_conflicts(controller: GridController) -> int:
    confs = find_conflicts(controller.store)
    if not confs:
        console.print("No conflicts found.")
        return 0

    console.print(f"Conflicts found: {len(confs)}")
    for a, b in confs:
        console.print(f"- {escape(event_line(a))}  <->  {escape(event_line(b))}")
    return 0


def _cmd_slots(controller: GridController) -> int:
    for slot in controller.time_slots():
        console.print(f"{slot.value}  {slot.label}")
    return 0


def _cmd_print(args: argparse.Namespace, controller: GridController) -> int:
    text = export_text(controller.visible_layout(), controller.config)
    out_path = (args.out or "").strip()
    if not out_path:
        console.print(text, markup=False, highlight=False)
        return 0
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    console.print(f"Grid written to: {out}")
    return 0


def _add_event_fields(p: argparse.ArgumentParser, required: bool) -> None:
    p.add_argument("--title", type=str, required=required, help="Event title")
    p.add_argument("--days", type=str, default=None, help="Comma-separated day labels (e.g. Mon,Wed)")
    p.add_argument("--start", type=str, default=None, help="Start time (e.g. 9, 930, 2:30pm, 14:00)")
    p.add_argument("--end", type=str, default=None, help="End time")
    p.add_argument("--color", type=str, default=None, help="Hex color (e.g. #BAE1FF)")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="weekgrid", description="WeekGrid weekly schedule editor")
    parser.add_argument("--file", "-f", type=Path, default=None, help="Schedule file (default: ./schedule.json)")
    parser.add_argument("--grid-days", type=str, default=None, help=f"Grid day labels (default: {','.join(DEFAULT_DAYS)})")
    parser.add_argument("--start-hour", type=int, default=DEFAULT_START_HOUR, help="First hour of the grid")
    parser.add_argument("--end-hour", type=int, default=DEFAULT_END_HOUR, help="Last hour of the grid")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Show the week grid")
    sub.add_parser("list", help="List all events with their numbers")

    p_add = sub.add_parser("add", help="Add an event (one per selected day)")
    _add_event_fields(p_add, required=True)

    p_edit = sub.add_parser("edit", help="Edit event by number (see 'list')")
    p_edit.add_argument("number", type=int, help="Event number")
    _add_event_fields(p_edit, required=False)

    p_remove = sub.add_parser("remove", help="Remove event by number (see 'list')")
    p_remove.add_argument("number", type=int, help="Event number")

    sub.add_parser("clear", help="Remove all events")
    sub.add_parser("conflicts", help="Show overlapping events")
    sub.add_parser("slots", help="Show the time suggestions of the grid")

    p_print = sub.add_parser("print", help="Render the grid as plain text")
    p_print.add_argument("--out", type=str, default="", help="Output text file (default: stdout)")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        days = parse_days(args.grid_days) if args.grid_days else list(DEFAULT_DAYS)
        config = GridConfig(days=days, bounds=ScheduleBounds(args.start_hour, args.end_hour))
    except ValueError as e:
        parser.error(str(e))

    path: Path = args.file if args.file is not None else default_schedule_path()

    controller = open_schedule(path, config)
    if controller is None:
        raise SystemExit(1)

    if args.command == "show":
        raise SystemExit(_cmd_show(controller))
    if args.command == "list":
        raise SystemExit(_cmd_list(controller))
    if args.command == "add":
        raise SystemExit(_cmd_add(args, controller, path))
    if args.command == "edit":
        raise SystemExit(_cmd_edit(args, controller, path))
    if args.command == "remove":
        raise SystemExit(_cmd_remove(args, controller, path))
    if args.command == "clear":
        raise SystemExit(_cmd_clear(controller, path))
    if args.command == "conflicts":
        raise SystemExit(_cmd_conflicts(controller))
    if args.command == "slots":
        raise SystemExit(_cmd_slots(controller))
    if args.command == "print":
        raise SystemExit(_cmd_print(args, controller))

    if args.command == "interactive":
        from weekgrid.interactive import run_interactive

        run_interactive(controller, path)
        raise SystemExit(0)

    raise SystemExit(2)
