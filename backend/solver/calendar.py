from __future__ import annotations

from solver.types import TimeSlot


SCHOOL_START = 7
SCHOOL_END = 15
TOTAL_HOURS = SCHOOL_END - SCHOOL_START

RECESS_DURATION = 0.5
LUNCH_DURATION = 1

# Upper bound on bookings within +/- this many hours of a candidate hour.
MAX_CONSECUTIVE_CLASSES = 2


def format_hour(hour: int, minutes: int = 0) -> str:
    return f"{int(hour)}:{int(minutes):02d}"


def school_hours() -> range:
    return range(SCHOOL_START, SCHOOL_END)


def generate_time_slots() -> list[TimeSlot]:
    """One-hour slots covering the operating day, in order."""
    return [
        TimeSlot(start_time=format_hour(hour), end_time=format_hour(hour + 1), hour=hour)
        for hour in school_hours()
    ]
