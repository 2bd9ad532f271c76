from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from solver.types import Course, Room, ScheduledClass, ScheduleOutput, Student, Teacher, TimeSlot


class StudentIn(BaseModel):
    id: str = ""
    name: str = ""
    section: str = ""
    courses: list[str] = Field(default_factory=list)

    def to_domain(self) -> Student:
        return Student(id=self.id, name=self.name, section=self.section, courses=tuple(self.courses))


class CourseIn(BaseModel):
    id: str = ""
    name: str = ""
    teacher_id: str = ""
    duration: int = Field(default=1, ge=1)

    def to_domain(self) -> Course:
        return Course(id=self.id, name=self.name, teacher_id=self.teacher_id, duration=self.duration)


class TeacherIn(BaseModel):
    id: str = ""
    name: str = ""
    courses: list[str] = Field(default_factory=list)

    def to_domain(self) -> Teacher:
        return Teacher(id=self.id, name=self.name, courses=tuple(self.courses))


class RoomIn(BaseModel):
    id: str = ""
    name: str = ""
    type: Literal["normal", "lab", "specialized"] = "normal"
    capacity: int = Field(default=50, ge=0)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: object) -> str:
        v = str(v or "normal").strip().lower()
        return v if v in {"lab", "specialized"} else "normal"

    def to_domain(self) -> Room:
        return Room(id=self.id, name=self.name, type=self.type, capacity=self.capacity)


class ScheduleRequest(BaseModel):
    """All four collections are required; `null` is rejected before the scheduler runs."""

    students: list[StudentIn]
    courses: list[CourseIn]
    teachers: list[TeacherIn]
    rooms: list[RoomIn]

    def course_map(self) -> dict[str, Course]:
        # Rows without an id are dropped, matching spreadsheet ingestion.
        return {c.id: c.to_domain() for c in self.courses if c.id.strip()}

    def teacher_map(self) -> dict[str, Teacher]:
        return {t.id: t.to_domain() for t in self.teachers if t.id.strip()}


class GoogleSheetsScheduleRequest(BaseModel):
    sheet_id: str = Field(min_length=1)


class TimeSlotOut(BaseModel):
    start_time: str
    end_time: str
    hour: int

    @classmethod
    def from_slot(cls, slot: TimeSlot) -> "TimeSlotOut":
        return cls(start_time=slot.start_time, end_time=slot.end_time, hour=slot.hour)


class ListTimeSlotsResponse(BaseModel):
    slots: list[TimeSlotOut] = Field(default_factory=list)


class ScheduledClassOut(BaseModel):
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
    students: list[str] = Field(default_factory=list)

    @classmethod
    def from_class(cls, sc: ScheduledClass) -> "ScheduledClassOut":
        return cls(
            id=sc.id,
            course_id=sc.course_id,
            course_name=sc.course_name,
            teacher_id=sc.teacher_id,
            teacher_name=sc.teacher_name,
            room_id=sc.room_id,
            room_name=sc.room_name,
            section=sc.section,
            start_time=sc.start_time,
            end_time=sc.end_time,
            students=list(sc.students),
        )


class BreaksOut(BaseModel):
    recess: list[TimeSlotOut] = Field(default_factory=list)
    lunch: list[TimeSlotOut] = Field(default_factory=list)


class SectionScheduleOut(BaseModel):
    section: str
    schedule: list[ScheduledClassOut] = Field(default_factory=list)
    breaks: BreaksOut = Field(default_factory=BreaksOut)


class ScheduleResponse(BaseModel):
    section_schedules: list[SectionScheduleOut] = Field(default_factory=list)
    teacher_schedules: dict[str, list[ScheduledClassOut]] = Field(default_factory=dict)
    room_schedules: dict[str, list[ScheduledClassOut]] = Field(default_factory=dict)

    @classmethod
    def from_output(cls, output: ScheduleOutput) -> "ScheduleResponse":
        # Each ScheduledClass is serialized once and reused across the three views.
        cache: dict[int, ScheduledClassOut] = {}

        def _out(sc: ScheduledClass) -> ScheduledClassOut:
            key = id(sc)
            if key not in cache:
                cache[key] = ScheduledClassOut.from_class(sc)
            return cache[key]

        return cls(
            section_schedules=[
                SectionScheduleOut(
                    section=s.section,
                    schedule=[_out(c) for c in s.schedule],
                    breaks=BreaksOut(
                        recess=[TimeSlotOut.from_slot(t) for t in s.breaks.recess],
                        lunch=[TimeSlotOut.from_slot(t) for t in s.breaks.lunch],
                    ),
                )
                for s in output.section_schedules
            ],
            teacher_schedules={k: [_out(c) for c in v] for k, v in output.teacher_schedules.items()},
            room_schedules={k: [_out(c) for c in v] for k, v in output.room_schedules.items()},
        )
