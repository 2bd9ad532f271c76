from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


RoomType = Literal["normal", "lab", "specialized"]


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    section: str
    courses: tuple[str, ...] = ()


@dataclass(frozen=True)
class Course:
    id: str
    name: str
    teacher_id: str
    # Accepted from ingestion; every placement is one hour regardless.
    duration: int = 1


@dataclass(frozen=True)
class Teacher:
    id: str
    name: str
    courses: tuple[str, ...] = ()


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    type: RoomType = "normal"
    capacity: int = 50


@dataclass(frozen=True)
class TimeSlot:
    start_time: str
    end_time: str
    hour: int


@dataclass(frozen=True)
class ScheduledClass:
    id: str
    course_id: str
    course_name: str
    teacher_id: str
    teacher_name: str
    room_id: str
    room_name: str
    section: str
    start_time: str
    end_time: str
    hour: int
    students: tuple[str, ...] = ()


@dataclass(frozen=True)
class BreakHours:
    recess: tuple[int, ...]
    lunch: tuple[int, ...]

    @property
    def all_hours(self) -> frozenset[int]:
        return frozenset(self.recess) | frozenset(self.lunch)


@dataclass
class BreakWindows:
    recess: list[TimeSlot] = field(default_factory=list)
    lunch: list[TimeSlot] = field(default_factory=list)


@dataclass
class SectionSchedule:
    section: str
    schedule: list[ScheduledClass] = field(default_factory=list)
    breaks: BreakWindows = field(default_factory=BreakWindows)


@dataclass
class ScheduleOutput:
    """Result of one scheduling pass.

    The teacher and room views hold the same ScheduledClass objects as the
    section schedules; nothing is copied between views.
    """

    section_schedules: list[SectionSchedule] = field(default_factory=list)
    teacher_schedules: dict[str, list[ScheduledClass]] = field(default_factory=dict)
    room_schedules: dict[str, list[ScheduledClass]] = field(default_factory=dict)

    def all_classes(self) -> list[ScheduledClass]:
        return [c for s in self.section_schedules for c in s.schedule]


# Booking map: entity id -> classes committed for that entity during one pass.
Bookings = dict[str, list[ScheduledClass]]
