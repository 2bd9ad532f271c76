from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from api.deps import get_sheets_client
from core.config import settings
from schemas.schedule import (
    GoogleSheetsScheduleRequest,
    ListTimeSlotsResponse,
    ScheduleRequest,
    ScheduleResponse,
    TimeSlotOut,
)
from services.ingestion import ParsedData, fetch_google_sheets, parse_excel_file
from solver.calendar import generate_time_slots
from solver.greedy_scheduler import generate_schedule


router = APIRouter()

logger = logging.getLogger(__name__)


def _schedule(data: ParsedData) -> ScheduleResponse:
    try:
        output = generate_schedule(data.students, data.courses, data.teachers, data.rooms)
    except Exception:
        logger.exception("Schedule generation failed")
        raise HTTPException(status_code=500, detail="SCHEDULE_FAILED")
    return ScheduleResponse.from_output(output)


@router.get("/time-slots", response_model=ListTimeSlotsResponse)
def list_time_slots() -> ListTimeSlotsResponse:
    return ListTimeSlotsResponse(slots=[TimeSlotOut.from_slot(s) for s in generate_time_slots()])


@router.post("", response_model=ScheduleResponse)
def create_schedule(payload: ScheduleRequest) -> ScheduleResponse:
    data = ParsedData(
        students=[s.to_domain() for s in payload.students],
        courses=payload.course_map(),
        teachers=payload.teacher_map(),
        rooms=[r.to_domain() for r in payload.rooms],
    )
    return _schedule(data)


@router.post("/upload", response_model=ScheduleResponse)
def upload_schedule(file: UploadFile | None = File(default=None)) -> ScheduleResponse:
    if file is None:
        raise HTTPException(status_code=400, detail="NO_FILE_PROVIDED")

    content = file.file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="FILE_TOO_LARGE")
    if not content:
        raise HTTPException(status_code=400, detail="EMPTY_FILE")

    logger.info("Scheduling from upload filename=%s bytes=%d", file.filename, len(content))
    # WorkbookParseError is mapped to 400 by the app-level handler.
    return _schedule(parse_excel_file(content))


@router.post("/google-sheets", response_model=ScheduleResponse)
def google_sheets_schedule(
    payload: GoogleSheetsScheduleRequest,
    client: httpx.Client = Depends(get_sheets_client),
) -> ScheduleResponse:
    api_key = settings.google_sheets_api_key
    if not api_key:
        raise HTTPException(status_code=400, detail="GOOGLE_SHEETS_NOT_CONFIGURED")

    data = fetch_google_sheets(payload.sheet_id.strip(), api_key, client=client)
    return _schedule(data)
