from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from solver.aggregator import build_schedule_output
from solver.availability import can_section_attend_at_time, can_teach_at_time, is_room_available
from solver.breaks import compute_break_hours, unique_sections
from solver.calendar import format_hour, school_hours
from solver.types import Bookings, Course, Room, ScheduledClass, ScheduleOutput, Student, Teacher


logger = logging.getLogger(__name__)


@dataclass
class _BookingState:
    """Booking maps owned by a single scheduling pass."""

    sections: Bookings = field(default_factory=dict)
    teachers: Bookings = field(default_factory=dict)
    rooms: Bookings = field(default_factory=dict)

    def commit(self, sc: ScheduledClass) -> None:
        # All three views receive the same object before the next availability check runs.
        self.sections.setdefault(sc.section, []).append(sc)
        self.teachers.setdefault(sc.teacher_id, []).append(sc)
        self.rooms.setdefault(sc.room_id, []).append(sc)


def _group_by_section(
    students: Sequence[Student],
    courses: Mapping[str, Course],
) -> tuple[dict[str, list[Student]], dict[str, list[Course]]]:
    roster: dict[str, list[Student]] = defaultdict(list)
    required: dict[str, list[Course]] = defaultdict(list)
    seen: dict[str, set[str]] = defaultdict(set)

    for student in students:
        roster[student.section].append(student)
        required.setdefault(student.section, [])
        for course_id in student.courses:
            course = courses.get(course_id)
            if course is None or course_id in seen[student.section]:
                continue
            seen[student.section].add(course_id)
            required[student.section].append(course)

    return dict(roster), dict(required)


def _place_course(
    state: _BookingState,
    *,
    section: str,
    course: Course,
    teacher: Teacher,
    rooms: Sequence[Room],
    break_hours: frozenset[int],
    student_ids: tuple[str, ...],
) -> ScheduledClass | None:
    for hour in school_hours():
        if hour in break_hours:
            continue
        for room in rooms:
            if not (
                can_section_attend_at_time(section, hour, state.sections, break_hours)
                and can_teach_at_time(course.teacher_id, hour, state.teachers, ())
                and is_room_available(room.id, hour, state.rooms)
            ):
                continue

            sc = ScheduledClass(
                id=f"{section}-{course.id}-{hour}",
                course_id=course.id,
                course_name=course.name,
                teacher_id=course.teacher_id,
                teacher_name=teacher.name,
                room_id=room.id,
                room_name=room.name,
                section=section,
                start_time=format_hour(hour),
                end_time=format_hour(hour + 1),
                hour=hour,
                students=student_ids,
            )
            state.commit(sc)
            return sc
    return None


def generate_schedule(
    students: Sequence[Student],
    courses: Mapping[str, Course],
    teachers: Mapping[str, Teacher],
    rooms: Sequence[Room],
) -> ScheduleOutput:
    """First-fit timetable for every section.

    Sections are visited in first-seen order, and each section's courses in the
    order its students first list them. A course is committed to the earliest
    (hour, room) pair that the section, the teacher and the room can all take;
    placements are never revisited. Courses with an unknown teacher, and
    courses that find no free pair before the day ends, are left out without
    raising.
    """

    sections = unique_sections(students)
    break_hours = compute_break_hours(sections)
    roster, required = _group_by_section(students, courses)

    state = _BookingState(
        sections={s: [] for s in sections},
        teachers={t.id: [] for t in teachers.values()},
        rooms={r.id: [] for r in rooms},
    )

    placed = 0
    unplaced = 0
    for section in sections:
        section_breaks = break_hours[section].all_hours
        student_ids = tuple(s.id for s in roster.get(section, []))

        for course in required.get(section, []):
            teacher = teachers.get(course.teacher_id)
            if teacher is None:
                logger.debug(
                    "Skipping course_id=%s for section=%s: unknown teacher_id=%s",
                    course.id,
                    section,
                    course.teacher_id,
                )
                unplaced += 1
                continue

            sc = _place_course(
                state,
                section=section,
                course=course,
                teacher=teacher,
                rooms=rooms,
                break_hours=section_breaks,
                student_ids=student_ids,
            )
            if sc is None:
                logger.debug("No free slot for course_id=%s in section=%s", course.id, section)
                unplaced += 1
            else:
                placed += 1

    logger.info(
        "Schedule generated: sections=%d placed=%d unplaced=%d rooms=%d",
        len(sections),
        placed,
        unplaced,
        len(rooms),
    )

    return build_schedule_output(
        sections,
        section_bookings=state.sections,
        teacher_bookings=state.teachers,
        room_bookings=state.rooms,
        break_hours=break_hours,
    )
