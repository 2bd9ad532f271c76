from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import httpx
from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from solver.types import Course, Room, Student, Teacher


logger = logging.getLogger(__name__)


SHEET_NAMES = ("Students", "Courses", "Teachers", "Rooms")

# Positional column layout used when a sheet arrives without usable headers (Google Sheets values API).
SHEET_COLUMNS: dict[str, tuple[str, ...]] = {
    "Students": ("ID", "Name", "Section", "Courses"),
    "Courses": ("ID", "Name", "TeacherID", "Duration"),
    "Teachers": ("ID", "Name", "Courses"),
    "Rooms": ("ID", "Name", "Type", "Capacity"),
}

DEFAULT_COURSE_DURATION = 1
DEFAULT_ROOM_CAPACITY = 50

GOOGLE_SHEETS_VALUES_URL = "https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{range}"


class WorkbookParseError(ValueError):
    pass


@dataclass
class ParsedData:
    students: list[Student] = field(default_factory=list)
    courses: dict[str, Course] = field(default_factory=dict)
    teachers: dict[str, Teacher] = field(default_factory=dict)
    rooms: list[Room] = field(default_factory=list)


def _cell_str(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, float) and v.is_integer():
        # Spreadsheets hand numeric ids back as floats (101 -> 101.0).
        return str(int(v))
    return str(v).strip()


def _cell_int(v: Any, default: int) -> int:
    try:
        n = int(float(_cell_str(v)))
    except (ValueError, OverflowError):
        return default
    return n or default


def _split_ids(v: Any) -> tuple[str, ...]:
    raw = _cell_str(v)
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(","))


def parse_students(rows: Iterable[Mapping[str, Any]]) -> list[Student]:
    return [
        Student(
            id=_cell_str(row.get("ID")),
            name=_cell_str(row.get("Name")),
            section=_cell_str(row.get("Section")),
            courses=_split_ids(row.get("Courses")),
        )
        for row in rows
    ]


def parse_courses(rows: Iterable[Mapping[str, Any]]) -> dict[str, Course]:
    out: dict[str, Course] = {}
    for row in rows:
        course = Course(
            id=_cell_str(row.get("ID")),
            name=_cell_str(row.get("Name")),
            teacher_id=_cell_str(row.get("TeacherID")),
            duration=_cell_int(row.get("Duration"), DEFAULT_COURSE_DURATION),
        )
        if course.id:
            out[course.id] = course
    return out


def parse_teachers(rows: Iterable[Mapping[str, Any]]) -> dict[str, Teacher]:
    out: dict[str, Teacher] = {}
    for row in rows:
        teacher = Teacher(
            id=_cell_str(row.get("ID")),
            name=_cell_str(row.get("Name")),
            courses=_split_ids(row.get("Courses")),
        )
        if teacher.id:
            out[teacher.id] = teacher
    return out


def parse_rooms(rows: Iterable[Mapping[str, Any]]) -> list[Room]:
    rooms: list[Room] = []
    for row in rows:
        room_type = (_cell_str(row.get("Type")) or "normal").lower()
        rooms.append(
            Room(
                id=_cell_str(row.get("ID")),
                name=_cell_str(row.get("Name")),
                type=room_type if room_type in {"lab", "specialized"} else "normal",
                capacity=_cell_int(row.get("Capacity"), DEFAULT_ROOM_CAPACITY),
            )
        )
    return rooms


def _rows_from_values(header: Iterable[Any], values: Iterable[Iterable[Any]]) -> list[dict[str, Any]]:
    keys = [_cell_str(h) for h in header]
    rows: list[dict[str, Any]] = []
    for raw in values:
        cells = list(raw)
        if not any(_cell_str(c) for c in cells):
            continue
        rows.append({k: (cells[i] if i < len(cells) else None) for i, k in enumerate(keys) if k})
    return rows


def _worksheet_rows(ws: Worksheet | None) -> list[dict[str, Any]]:
    if ws is None:
        return []
    it = ws.iter_rows(values_only=True)
    header = next(it, None)
    if header is None:
        return []
    return _rows_from_values(header, it)


def _pick_sheet(wb, name: str, position: int) -> Worksheet | None:
    if name in wb.sheetnames:
        return wb[name]
    if position < len(wb.worksheets):
        return wb.worksheets[position]
    return None


def parse_excel_file(content: bytes) -> ParsedData:
    """Parse an uploaded workbook with Students/Courses/Teachers/Rooms sheets.

    Sheets are looked up by name first, then by position (0..3). A missing
    sheet yields an empty collection.
    """
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise WorkbookParseError(f"Unreadable workbook: {exc}") from exc

    try:
        sheets = {name: _worksheet_rows(_pick_sheet(wb, name, i)) for i, name in enumerate(SHEET_NAMES)}
    finally:
        wb.close()

    data = ParsedData(
        students=parse_students(sheets["Students"]),
        courses=parse_courses(sheets["Courses"]),
        teachers=parse_teachers(sheets["Teachers"]),
        rooms=parse_rooms(sheets["Rooms"]),
    )
    logger.info(
        "Parsed workbook: students=%d courses=%d teachers=%d rooms=%d",
        len(data.students),
        len(data.courses),
        len(data.teachers),
        len(data.rooms),
    )
    return data


def _fetch_sheet_values(client: httpx.Client, *, sheet_id: str, sheet_name: str, api_key: str) -> list[list[Any]]:
    resp = client.get(
        GOOGLE_SHEETS_VALUES_URL.format(sheet_id=sheet_id, range=sheet_name),
        params={"key": api_key},
    )
    resp.raise_for_status()
    data = resp.json()
    values = data.get("values") if isinstance(data, dict) else None
    return list(values or [])


def fetch_google_sheets(sheet_id: str, api_key: str, *, client: httpx.Client | None = None) -> ParsedData:
    """Read the four sheets of a shared Google spreadsheet.

    Columns are positional; the first row of each sheet is treated as a header
    and skipped. A sheet that fails to load is logged and left empty.
    """
    own_client = client is None
    if client is None:
        client = httpx.Client(timeout=30.0)

    sheets: dict[str, list[dict[str, Any]]] = {name: [] for name in SHEET_NAMES}
    try:
        for name in SHEET_NAMES:
            try:
                values = _fetch_sheet_values(client, sheet_id=sheet_id, sheet_name=name, api_key=api_key)
            except (httpx.HTTPError, ValueError):
                logger.warning("Failed to fetch sheet %s from spreadsheet %s", name, sheet_id, exc_info=True)
                continue
            if not values:
                continue
            sheets[name] = _rows_from_values(SHEET_COLUMNS[name], values[1:])
    finally:
        if own_client:
            client.close()

    return ParsedData(
        students=parse_students(sheets["Students"]),
        courses=parse_courses(sheets["Courses"]),
        teachers=parse_teachers(sheets["Teachers"]),
        rooms=parse_rooms(sheets["Rooms"]),
    )
