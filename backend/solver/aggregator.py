from __future__ import annotations

from typing import Mapping, Sequence

from solver.calendar import LUNCH_DURATION, RECESS_DURATION, format_hour
from solver.types import BreakHours, BreakWindows, Bookings, ScheduleOutput, SectionSchedule, TimeSlot


def _window(hour: int, duration: float) -> TimeSlot:
    end_minutes = int(round((hour + duration) * 60))
    return TimeSlot(
        start_time=format_hour(hour),
        end_time=format_hour(end_minutes // 60, end_minutes % 60),
        hour=hour,
    )


def break_windows(hours: BreakHours | None) -> BreakWindows:
    if hours is None:
        return BreakWindows()
    return BreakWindows(
        recess=[_window(h, RECESS_DURATION) for h in hours.recess],
        lunch=[_window(h, LUNCH_DURATION) for h in hours.lunch],
    )


def build_schedule_output(
    sections: Sequence[str],
    *,
    section_bookings: Bookings,
    teacher_bookings: Bookings,
    room_bookings: Bookings,
    break_hours: Mapping[str, BreakHours],
) -> ScheduleOutput:
    section_schedules: list[SectionSchedule] = []
    for section in sections:
        # sorted() is stable; equal hours keep insertion order.
        classes = sorted(section_bookings.get(section) or [], key=lambda c: c.hour)
        section_schedules.append(
            SectionSchedule(
                section=section,
                schedule=classes,
                breaks=break_windows(break_hours.get(section)),
            )
        )

    return ScheduleOutput(
        section_schedules=section_schedules,
        teacher_schedules=teacher_bookings,
        room_schedules=room_bookings,
    )
