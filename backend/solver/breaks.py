from __future__ import annotations

import math
from typing import Iterable

from solver.calendar import SCHOOL_START, TOTAL_HOURS
from solver.types import BreakHours, Student


BASE_RECESS_HOUR = math.floor(SCHOOL_START + TOTAL_HOURS / 3)
BASE_LUNCH_HOUR = math.floor(SCHOOL_START + (TOTAL_HOURS * 2) / 3)


def unique_sections(students: Iterable[Student]) -> list[str]:
    seen: dict[str, None] = {}
    for s in students:
        seen.setdefault(s.section, None)
    return list(seen)


def compute_break_hours(sections: Iterable[str]) -> dict[str, BreakHours]:
    """Staggered recess/lunch hours per section.

    Sections at an even position get the base hours, odd positions are pushed
    one hour later so neighbouring sections don't break together. Hours are not
    clamped to the operating day.
    """
    out: dict[str, BreakHours] = {}
    for index, section in enumerate(sections):
        offset = index % 2
        out[section] = BreakHours(
            recess=(BASE_RECESS_HOUR + offset,),
            lunch=(BASE_LUNCH_HOUR + offset,),
        )
    return out
