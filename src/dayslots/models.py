from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .timeutils import SLOT_MINUTES, SLOTS_PER_DAY

__all__ = ["Mode", "Slot", "Task", "SLOT_MINUTES", "SLOTS_PER_DAY"]


class Mode(str, Enum):
    BROWSING = "browsing"
    SELECTION = "selection"
    CREATION = "creation"


@dataclass(slots=True)
class Task:
    task_id: int
    day: date
    slot: int
    title: str
    duration: int
    done: bool = False
    created_at: datetime | None = None


@dataclass(slots=True)
class Slot:
    index: int
    start: datetime
    tasks: list[Task] = field(default_factory=list)
