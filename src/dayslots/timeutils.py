from __future__ import annotations

from datetime import date, datetime, time, timedelta
import re

SLOT_MINUTES = 30
SLOTS_PER_DAY = 24 * 60 // SLOT_MINUTES


def slot_index(moment: datetime | time) -> int:
    """Return the half-hour slot a wall-clock moment falls into."""
    return (moment.hour * 60 + moment.minute) // SLOT_MINUTES


def slot_start(day: date, index: int) -> datetime:
    base = datetime.combine(day, time(hour=0, minute=0))
    return base + timedelta(minutes=index * SLOT_MINUTES)


def format_clock(value: datetime) -> str:
    # 12-hour clock without a leading zero, e.g. "9:00 AM"
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_slot_range(start: datetime) -> str:
    end = start + timedelta(minutes=SLOT_MINUTES)
    return f"{format_clock(start)} - {format_clock(end)}"


def format_day(value: date) -> str:
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"


def parse_minutes(value: str) -> int:
    cleaned = value.strip()
    if not re.fullmatch(r"[+-]?[0-9]+", cleaned):
        raise ValueError(f"Unsupported duration format: {value}")
    minutes = int(cleaned)
    if minutes <= 0:
        raise ValueError(f"Duration must be positive: {value}")
    return minutes
