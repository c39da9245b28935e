"""
Terminal rendering of the week grid (rich).

One column per day, one row per hour. Each event appears once, in the cell
where it starts, with its title and 12-hour time range. Events that overlap
another event on the same day are flagged with "!".
"""

from __future__ import annotations

import io
import re
from collections import defaultdict

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from weekgrid.conflicts import conflicting_ids
from weekgrid.geometry import PlacedEvent, time_label
from weekgrid.model import Event, GridConfig
from weekgrid.timecodec import format_hour

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def _card(placed: PlacedEvent, conflicted: bool) -> Text:
    ev = placed.event
    text = Text()
    marker = "! " if conflicted else ""
    text.append(f"{marker}{ev.title}", style="bold")
    text.append(f"\n{placed.time_label}", style="dim")
    if isinstance(ev.color, str) and _HEX_COLOR.match(ev.color):
        text.stylize(f"on {ev.color}")
        text.stylize("black")
    return text


def build_grid_table(placed: list[PlacedEvent], config: GridConfig, title: str = "Weekly schedule") -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY, show_lines=True)
    table.add_column("Time", justify="right", style="cyan", no_wrap=True)
    for day in config.days:
        table.add_column(day)

    conflicted = conflicting_ids(p.event for p in placed)
    by_cell: dict[tuple[int, int], list[PlacedEvent]] = defaultdict(list)
    for p in placed:
        by_cell[(p.column, p.hour)].append(p)

    for hour in config.bounds.hours():
        row: list[Text | str] = [format_hour(hour)]
        for column in range(len(config.days)):
            cards = sorted(by_cell.get((column, hour), []), key=lambda p: p.layout.top_fraction)
            if not cards:
                row.append("")
                continue
            cell = Text()
            for i, p in enumerate(cards):
                if i:
                    cell.append("\n")
                cell.append_text(_card(p, p.event.event_id in conflicted))
            row.append(cell)
        table.add_row(*row)
    return table


def event_line(ev: Event) -> str:
    try:
        when = time_label(ev)
    except ValueError:
        when = f"{ev.start_time}-{ev.end_time}"
    return f"{ev.day} | {when} | {ev.title} | {ev.color}"


def build_event_list_table(events: list[Event], title: str = "Events") -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Day")
    table.add_column("Time")
    table.add_column("Title")
    table.add_column("Color")
    for i, ev in enumerate(events, start=1):
        try:
            when = time_label(ev)
        except ValueError:
            when = f"{ev.start_time}-{ev.end_time}"
        table.add_row(str(i), str(ev.day), when, str(ev.title), str(ev.color))
    return table


def export_text(placed: list[PlacedEvent], config: GridConfig, width: int = 160) -> str:
    """
    Plain-text version of the grid (the "print" action).
    """
    console = Console(record=True, width=width, file=io.StringIO(), color_system=None)
    console.print(build_grid_table(placed, config))
    return console.export_text()
