"""
Tests for the grid controller (editor state machine, validation, save/load).

Clock, random generator and id factory are injected so every run is deterministic.
"""

import itertools
import json
import random
import unittest

from weekgrid.config import PASTEL_PALETTE
from weekgrid.controller import ERROR, SUCCESS, GridController, Toast
from weekgrid.model import EditorDraft, GridConfig, ScheduleBounds
from weekgrid.schedule_file import dumps
from weekgrid.store import EventStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _counter_ids():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


class ControllerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.toasts: list[Toast] = []
        self.controller = GridController(
            config=GridConfig(days=["Mon", "Tue", "Wed", "Thu", "Fri"], bounds=ScheduleBounds(5, 23)),
            store=EventStore(id_factory=_counter_ids()),
            toast_sink=self.toasts.append,
            clock=self.clock,
            rng=random.Random(7),
        )

    def add_event(self, title: str = "Focus", days=("Mon",), start: str = "09:00", end: str = "10:00"):
        c = self.controller
        c.add_click()
        c.set_title(title)
        c.set_days(list(days))
        c.set_time("start", start)
        c.set_time("end", end)
        return c.submit()


class TestOpenEditor(ControllerTestCase):
    def test_add_click_defaults(self) -> None:
        self.assertTrue(self.controller.add_click())
        draft = self.controller.editor
        assert draft is not None
        self.assertEqual(draft.days, ["Mon"])
        self.assertEqual((draft.start_time, draft.end_time), ("09:00", "10:00"))
        self.assertIn(draft.color, PASTEL_PALETTE)
        self.assertIsNone(draft.editing_event_id)

    def test_cell_click_seeds_range(self) -> None:
        self.controller.cell_click("Wed", 14)
        draft = self.controller.editor
        assert draft is not None
        self.assertEqual(draft.days, ["Wed"])
        self.assertEqual((draft.start_time, draft.end_time), ("14:00", "15:00"))

    def test_editor_is_modal(self) -> None:
        self.controller.cell_click("Wed", 14)
        self.assertFalse(self.controller.cell_click("Thu", 8))
        self.assertEqual(self.controller.editor.days, ["Wed"])

    def test_event_click_seeds_from_event(self) -> None:
        ev = self.add_event(title="Lunch", days=["Tue"], start="12:00", end="13:00")[0]
        self.assertTrue(self.controller.event_click(ev.event_id))
        draft = self.controller.editor
        self.assertEqual(draft.editing_event_id, ev.event_id)
        self.assertEqual((draft.title, draft.days, draft.start_time), ("Lunch", ["Tue"], "12:00"))

    def test_event_click_unknown_id(self) -> None:
        self.assertFalse(self.controller.event_click("ghost"))
        self.assertFalse(self.controller.is_editor_open)


class TestDraftEditing(ControllerTestCase):
    def test_toggle_day_keeps_configured_order(self) -> None:
        c = self.controller
        c.cell_click("Fri", 9)
        c.toggle_day("Mon")
        c.toggle_day("Wed")
        self.assertEqual(c.editor.days, ["Mon", "Wed", "Fri"])
        c.toggle_day("Fri")
        self.assertEqual(c.editor.days, ["Mon", "Wed"])

    def test_set_time_free_text_and_fallback(self) -> None:
        c = self.controller
        c.add_click()
        self.assertEqual(c.set_time("start", "2:30pm"), "14:30")
        self.assertEqual(c.set_time("start", "soon"), "14:30")
        self.assertEqual(c.editor.start_time, "14:30")

    def test_ambiguous_time_is_logged(self) -> None:
        c = self.controller
        c.add_click()
        with self.assertLogs("weekgrid.controller", level="WARNING"):
            self.assertEqual(c.set_time("end", "45"), "23:00")


class TestSubmit(ControllerTestCase):
    def test_create_multi_day(self) -> None:
        created = self.add_event(days=["Mon", "Wed"])
        self.assertEqual(len(created), 2)
        self.assertEqual(len(self.controller.store), 2)
        self.assertNotEqual(created[0].event_id, created[1].event_id)
        self.assertFalse(self.controller.is_editor_open)

    def test_end_before_start_rejected(self) -> None:
        before = len(self.controller.store)
        result = self.add_event(start="10:00", end="09:00")
        self.assertIsNone(result)
        self.assertEqual(len(self.controller.store), before)
        self.assertTrue(self.controller.is_editor_open)
        self.assertEqual(self.toasts[-1].kind, ERROR)
        self.assertIn("End time", self.toasts[-1].message)

    def test_out_of_bounds_rejected(self) -> None:
        self.assertIsNone(self.add_event(start="04:00", end="06:00"))
        self.assertEqual(len(self.controller.store), 0)
        self.assertIn("between", self.toasts[-1].message)

    def test_bounds_checked_before_duration(self) -> None:
        self.assertIsNone(self.add_event(start="23:30", end="23:00"))
        self.assertIn("between", self.toasts[-1].message)

    def test_no_days_rejected(self) -> None:
        self.assertIsNone(self.add_event(days=[]))
        self.assertIn("day", self.toasts[-1].message)

    def test_empty_title_rejected(self) -> None:
        self.assertIsNone(self.add_event(title="   "))
        self.assertEqual(len(self.controller.store), 0)

    def test_terminal_cell_needs_adjusting(self) -> None:
        c = GridController(config=GridConfig(bounds=ScheduleBounds(5, 24)), toast_sink=self.toasts.append)
        c.cell_click("Mon", 24)
        c.set_title("Night")
        self.assertIsNone(c.submit())
        c.set_time("start", "23")
        self.assertIsNotNone(c.submit())

    def test_edit_fans_out(self) -> None:
        original = self.add_event(title="Review", days=["Mon"])[0]
        c = self.controller
        c.event_click(original.event_id)
        c.set_days(["Wed", "Fri"])
        result = c.submit()

        self.assertEqual(result[0].event_id, original.event_id)
        self.assertEqual(result[0].day, "Wed")
        self.assertEqual(result[1].day, "Fri")
        self.assertNotEqual(result[1].event_id, original.event_id)
        self.assertEqual([e for e in c.store if e.day == "Mon" and e.title == "Review"], [])

    def test_edit_of_vanished_event_reopens_as_create(self) -> None:
        original = self.add_event()[0]
        c = self.controller
        c.event_click(original.event_id)
        c.store.delete(original.event_id)

        self.assertIsNone(c.submit())
        self.assertTrue(c.is_editor_open)
        self.assertIsNone(c.editor.editing_event_id)
        self.assertEqual(self.toasts[-1].kind, ERROR)

        created = c.submit()
        self.assertEqual(len(created), 1)
        self.assertEqual(len(c.store), 1)

    def test_cancel_and_delete(self) -> None:
        ev = self.add_event()[0]
        c = self.controller
        c.event_click(ev.event_id)
        c.cancel()
        self.assertFalse(c.is_editor_open)
        self.assertEqual(len(c.store), 1)

        c.event_click(ev.event_id)
        c.delete()
        self.assertFalse(c.is_editor_open)
        self.assertEqual(len(c.store), 0)


class TestSaveLoad(ControllerTestCase):
    def test_save_then_load(self) -> None:
        self.add_event(title="A", days=["Mon", "Tue"])
        saved: dict[str, bytes] = {}

        def download(data: bytes, filename: str) -> None:
            saved[filename] = data

        self.assertTrue(self.controller.save(download))
        self.assertIn("schedule.json", saved)
        self.assertEqual(self.toasts[-1].kind, SUCCESS)

        self.controller.clear()
        self.assertEqual(len(self.controller.store), 0)

        self.assertTrue(self.controller.load(lambda: saved["schedule.json"]))
        self.assertEqual(sorted(e.day for e in self.controller.store), ["Mon", "Tue"])

    def test_failed_load_keeps_schedule(self) -> None:
        self.add_event()
        before = self.controller.store.events

        self.assertFalse(self.controller.load(lambda: b'{"nope": 1}'))
        self.assertEqual(self.controller.store.events, before)
        self.assertEqual(self.toasts[-1].kind, ERROR)

        def unreadable() -> bytes:
            raise OSError("disk on fire")

        self.assertFalse(self.controller.load(unreadable))
        self.assertEqual(self.controller.store.events, before)

        for data in (b"[" * 100000 + b"]" * 100000, b'{"events": ' + b"9" * 5000 + b"}"):
            self.assertFalse(self.controller.load(lambda: data))
            self.assertEqual(self.controller.store.events, before)

    def test_failed_save_reports_error(self) -> None:
        def broken(data: bytes, filename: str) -> None:
            raise PermissionError("read-only")

        self.assertFalse(self.controller.save(broken))
        self.assertEqual(self.toasts[-1].kind, ERROR)

    def test_loaded_event_with_non_string_title_can_be_fixed(self) -> None:
        record = {"title": 5, "day": "Mon", "startTime": "09:00", "endTime": "10:00", "color": "#FFFFFF"}
        with self.assertLogs("weekgrid.schedule_file", level="WARNING"):
            self.assertTrue(self.controller.load(lambda: json.dumps({"events": [record]}).encode("utf-8")))
        c = self.controller
        event_id = c.store.events[0].event_id

        self.assertTrue(c.event_click(event_id))
        self.assertIsNone(c.submit())
        self.assertEqual(self.toasts[-1].kind, ERROR)
        self.assertTrue(c.is_editor_open)

        c.toggle_day("Tue")
        c.set_title("Five")
        stored = c.submit()
        assert stored is not None
        self.assertEqual((stored[0].event_id, stored[0].title), (event_id, "Five"))
        self.assertEqual([e.day for e in stored], ["Mon", "Tue"])

    def test_load_replaces_events(self) -> None:
        self.add_event(title="Old")
        other = EventStore()
        other.create(EditorDraft(title="New", days=["Thu"], start_time="08:00", end_time="09:00", color="#FFFFFF"))
        self.assertTrue(self.controller.load(lambda: dumps(other)))
        self.assertEqual([e.title for e in self.controller.store], ["New"])



class TestToast(ControllerTestCase):
    def test_auto_dismiss(self) -> None:
        c = self.controller
        c.notify("hello", SUCCESS, duration_ms=4000)
        self.assertEqual(c.current_toast().message, "hello")
        self.clock.now += 3.9
        self.assertIsNotNone(c.current_toast())
        self.clock.now += 0.2
        self.assertIsNone(c.current_toast())

    def test_manual_dismiss(self) -> None:
        c = self.controller
        c.notify("bye")
        c.dismiss_toast()
        self.assertIsNone(c.current_toast())


class TestVisibleLayout(ControllerTestCase):
    def test_layout_uses_config(self) -> None:
        self.add_event(days=["Wed"], start="09:15", end="10:00")
        placed = self.controller.visible_layout()
        self.assertEqual(len(placed), 1)
        self.assertEqual(placed[0].column, 2)
        self.assertAlmostEqual(placed[0].layout.top_fraction, 0.25)


if __name__ == "__main__":
    unittest.main()
