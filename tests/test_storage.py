from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
import sqlite3
import tempfile
import unittest

from dayslots.storage import StoreError, TaskStore


class TaskStoreTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.db_path = Path(self._tmpdir.name) / "nested" / "scheduler.db"
        self.store = TaskStore(self.db_path)

    def tearDown(self) -> None:
        self.store.close()
        self._tmpdir.cleanup()

    def test_creates_parent_directory(self) -> None:
        self.assertTrue(self.db_path.exists())

    def test_save_and_list_round_trip(self) -> None:
        day = date(2024, 3, 1)
        task_id = self.store.save(day, 18, "Standup", 30)
        tasks = self.store.list_for_date(day)
        self.assertEqual(len(tasks), 1)
        task = tasks[0]
        self.assertEqual(task.task_id, task_id)
        self.assertEqual(task.slot, 18)
        self.assertEqual(task.title, "Standup")
        self.assertEqual(task.duration, 30)
        self.assertFalse(task.done)
        self.assertEqual(task.day, day)
        self.assertIsInstance(task.created_at, datetime)

    def test_list_filters_by_date_and_orders_by_slot(self) -> None:
        day = date(2024, 3, 1)
        self.store.save(day, 20, "second", 15)
        self.store.save(day, 5, "first", 15)
        self.store.save(day, 20, "third", 15)
        self.store.save(date(2024, 3, 2), 5, "tomorrow", 15)
        titles = [task.title for task in self.store.list_for_date(day)]
        self.assertEqual(titles, ["first", "second", "third"])

    def test_ids_are_unique(self) -> None:
        day = date(2024, 3, 1)
        ids = {self.store.save(day, 1, f"t{i}", 10) for i in range(5)}
        self.assertEqual(len(ids), 5)

    def test_set_done(self) -> None:
        day = date(2024, 3, 1)
        task_id = self.store.save(day, 3, "Laundry", 60)
        self.store.set_done(task_id, True)
        self.assertTrue(self.store.list_for_date(day)[0].done)
        self.store.set_done(task_id, False)
        self.assertFalse(self.store.list_for_date(day)[0].done)

    def test_delete(self) -> None:
        day = date(2024, 3, 1)
        keep = self.store.save(day, 3, "keep", 10)
        drop = self.store.save(day, 3, "drop", 10)
        self.store.delete(drop)
        self.assertEqual([t.task_id for t in self.store.list_for_date(day)], [keep])

    def test_data_survives_reopen(self) -> None:
        day = date(2024, 3, 1)
        self.store.save(day, 47, "Late", 30)
        self.store.close()
        self.store = TaskStore(self.db_path)
        self.assertEqual([t.title for t in self.store.list_for_date(day)], ["Late"])

    def test_out_of_range_rows_are_returned_as_stored(self) -> None:
        day = date(2024, 3, 1)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO tasks (date, time_slot, title, duration, done) VALUES (?, ?, ?, ?, ?)",
                (day.isoformat(), 60, "legacy", 30, 0),
            )
        conn.close()
        self.assertEqual([t.slot for t in self.store.list_for_date(day)], [60])

    def test_errors_are_wrapped(self) -> None:
        self.store.close()
        with self.assertRaises(StoreError):
            self.store.list_for_date(date(2024, 3, 1))
        with self.assertRaises(StoreError):
            self.store.save(date(2024, 3, 1), 1, "x", 1)
        self.store = TaskStore(self.db_path)

    def test_unopenable_path_raises_store_error(self) -> None:
        blocker = Path(self._tmpdir.name) / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        with self.assertRaises(StoreError):
            TaskStore(blocker / "scheduler.db")


if __name__ == "__main__":
    unittest.main()
