from __future__ import annotations

from dataclasses import dataclass

from .models import SLOTS_PER_DAY

# Slots kept above the now-slot when recentring.
NOW_OFFSET = 3


@dataclass(slots=True)
class Viewport:
    """Fixed-height window of slot indices kept around the cursor."""

    top: int
    bottom: int
    height: int
    total: int = SLOTS_PER_DAY

    @classmethod
    def around(cls, slot: int, height: int = 6, total: int = SLOTS_PER_DAY) -> "Viewport":
        if not 1 <= height <= total:
            raise ValueError(f"Viewport height must be between 1 and {total}: {height}")
        view = cls(top=0, bottom=height - 1, height=height, total=total)
        view.centre_on(slot)
        return view

    def follow(self, cursor: int) -> None:
        if cursor > self.bottom:
            diff = cursor - self.bottom
            self.top += diff
            self.bottom += diff
        if cursor < self.top:
            diff = self.top - cursor
            self.top -= diff
            self.bottom -= diff
        self._clamp()

    def centre_on(self, slot: int) -> None:
        self.top = slot - NOW_OFFSET
        self.bottom = self.top + self.height - 1
        self._clamp()

    def _clamp(self) -> None:
        if self.bottom >= self.total:
            self.bottom = self.total - 1
            self.top = self.bottom - self.height + 1
        if self.top < 0:
            self.top = 0
            self.bottom = self.height - 1

    @property
    def indices(self) -> range:
        return range(self.top, self.bottom + 1)
