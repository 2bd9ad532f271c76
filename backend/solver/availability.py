from __future__ import annotations

from typing import Collection, Mapping, Sequence

from solver.calendar import MAX_CONSECUTIVE_CLASSES
from solver.types import ScheduledClass


def is_break_time(hour: int, break_hours: Collection[int]) -> bool:
    return hour in break_hours


def _has_capacity_at(hour: int, booked: Sequence[ScheduledClass]) -> bool:
    if any(c.hour == hour for c in booked):
        return False

    # Windowed count, not a run length: 7, 9 and 11 all fall inside the window around 9.
    nearby = sum(1 for c in booked if abs(c.hour - hour) <= MAX_CONSECUTIVE_CLASSES)
    return nearby < MAX_CONSECUTIVE_CLASSES


def can_teach_at_time(
    teacher_id: str,
    hour: int,
    teacher_bookings: Mapping[str, Sequence[ScheduledClass]],
    break_hours: Collection[int] = (),
) -> bool:
    if is_break_time(hour, break_hours):
        return False
    return _has_capacity_at(hour, teacher_bookings.get(teacher_id) or ())


def can_section_attend_at_time(
    section: str,
    hour: int,
    section_bookings: Mapping[str, Sequence[ScheduledClass]],
    break_hours: Collection[int] = (),
) -> bool:
    if is_break_time(hour, break_hours):
        return False
    return _has_capacity_at(hour, section_bookings.get(section) or ())


def is_room_available(
    room_id: str,
    hour: int,
    room_bookings: Mapping[str, Sequence[ScheduledClass]],
) -> bool:
    return not any(c.hour == hour for c in room_bookings.get(room_id) or ())
