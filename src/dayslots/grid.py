from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Iterator

from .models import SLOTS_PER_DAY, Slot, Task
from .timeutils import slot_start

log = logging.getLogger(__name__)


class SlotGrid:
    """One calendar day as 48 fixed half-hour slots."""

    def __init__(self, day: date, slots: list[Slot]) -> None:
        self.day = day
        self._slots = slots

    @classmethod
    def generate(cls, day: date) -> "SlotGrid":
        slots = [Slot(index=i, start=slot_start(day, i)) for i in range(SLOTS_PER_DAY)]
        return cls(day, slots)

    def populate(self, tasks: Iterable[Task]) -> int:
        """Replace every slot's tasks with ``tasks``, keeping their order.

        Rows pointing outside the day are skipped. Returns how many were
        skipped.
        """
        for slot in self._slots:
            slot.tasks.clear()
        dropped = 0
        for task in tasks:
            if 0 <= task.slot < len(self._slots):
                self._slots[task.slot].tasks.append(task)
            else:
                dropped += 1
                log.warning("Ignoring task %s with out-of-range slot %s", task.task_id, task.slot)
        return dropped

    def tasks_at(self, index: int) -> list[Task]:
        return self._slots[index].tasks

    def remove(self, index: int, task_id: int) -> None:
        slot = self._slots[index]
        slot.tasks[:] = [task for task in slot.tasks if task.task_id != task_id]

    def __getitem__(self, index: int) -> Slot:
        return self._slots[index]

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Slot]:
        return iter(self._slots)
