from __future__ import annotations

from datetime import date, datetime
import unittest

from dayslots.grid import SlotGrid
from dayslots.models import Task


def _task(task_id: int, slot: int, title: str = "Task") -> Task:
    return Task(task_id=task_id, day=date(2024, 3, 1), slot=slot, title=title, duration=30)


class SlotGridTest(unittest.TestCase):
    def test_generate_builds_48_consecutive_slots(self) -> None:
        grid = SlotGrid.generate(date(2024, 3, 1))
        self.assertEqual(len(grid), 48)
        self.assertEqual(grid[0].start, datetime(2024, 3, 1, 0, 0))
        self.assertEqual(grid[1].start, datetime(2024, 3, 1, 0, 30))
        self.assertEqual(grid[47].start, datetime(2024, 3, 1, 23, 30))
        self.assertTrue(all(not slot.tasks for slot in grid))
        self.assertEqual([slot.index for slot in grid], list(range(48)))

    def test_populate_keeps_gateway_order(self) -> None:
        grid = SlotGrid.generate(date(2024, 3, 1))
        grid.populate([_task(3, 20, "b"), _task(1, 20, "a"), _task(2, 5, "c")])
        self.assertEqual([t.title for t in grid.tasks_at(20)], ["b", "a"])
        self.assertEqual([t.title for t in grid.tasks_at(5)], ["c"])

    def test_populate_clears_previous_tasks(self) -> None:
        grid = SlotGrid.generate(date(2024, 3, 1))
        grid.populate([_task(1, 20)])
        grid.populate([_task(2, 21)])
        self.assertEqual(grid.tasks_at(20), [])
        self.assertEqual([t.task_id for t in grid.tasks_at(21)], [2])

    def test_populate_drops_out_of_range_rows(self) -> None:
        grid = SlotGrid.generate(date(2024, 3, 1))
        dropped = grid.populate([_task(1, -1), _task(2, 48), _task(3, 47), _task(4, 99)])
        self.assertEqual(dropped, 3)
        self.assertEqual([t.task_id for t in grid.tasks_at(47)], [3])
        self.assertEqual(sum(len(slot.tasks) for slot in grid), 1)

    def test_remove_by_id(self) -> None:
        grid = SlotGrid.generate(date(2024, 3, 1))
        grid.populate([_task(1, 20), _task(2, 20)])
        grid.remove(20, 1)
        self.assertEqual([t.task_id for t in grid.tasks_at(20)], [2])


if __name__ == "__main__":
    unittest.main()
