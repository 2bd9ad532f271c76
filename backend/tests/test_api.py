from __future__ import annotations

import asyncio
import io
import logging

import httpx
import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from api.deps import get_sheets_client
from api.routes import schedule as schedule_routes
from core.config import settings
from main import app
from services.ingestion import parse_excel_file


XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _payload() -> dict:
    return {
        "students": [
            {"id": "S1", "name": "Ann", "section": "A", "courses": ["C1"]},
            {"id": "S2", "name": "Ben", "section": "A", "courses": ["C1"]},
        ],
        "courses": [{"id": "C1", "name": "Maths", "teacher_id": "T1", "duration": 1}],
        "teachers": [{"id": "T1", "name": "Mrs One", "courses": ["C1"]}],
        "rooms": [{"id": "R1", "name": "Room 1", "type": "normal", "capacity": 30}],
    }


def _workbook_bytes() -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Students"
    ws.append(["ID", "Name", "Section", "Courses"])
    ws.append(["S1", "Ann", "A", "C1,C2"])
    ws.append(["S2", "Ben", "B", "C2"])
    ws = wb.create_sheet("Courses")
    ws.append(["ID", "Name", "TeacherID", "Duration"])
    ws.append(["C1", "Maths", "T1", 1])
    ws.append(["C2", "Physics", "T2", 1])
    ws = wb.create_sheet("Teachers")
    ws.append(["ID", "Name", "Courses"])
    ws.append(["T1", "Mrs One", "C1"])
    ws.append(["T2", "Mr Two", "C2"])
    ws = wb.create_sheet("Rooms")
    ws.append(["ID", "Name", "Type", "Capacity"])
    ws.append(["R1", "Room 1", "normal", 30])
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"app": "ok"}


def test_time_slots(client):
    r = client.get("/api/schedule/time-slots")
    assert r.status_code == 200
    slots = r.json()["slots"]
    assert len(slots) == 8
    assert slots[0] == {"start_time": "7:00", "end_time": "8:00", "hour": 7}


def test_schedule_from_json(client):
    r = client.post("/api/schedule", json=_payload())
    assert r.status_code == 200, r.text
    body = r.json()

    [section] = body["section_schedules"]
    assert section["section"] == "A"
    [cls] = section["schedule"]
    assert cls["id"] == "A-C1-7"
    assert cls["start_time"] == "7:00"
    assert cls["end_time"] == "8:00"
    assert cls["students"] == ["S1", "S2"]
    assert section["breaks"]["recess"] == [{"start_time": "9:00", "end_time": "9:30", "hour": 9}]
    assert section["breaks"]["lunch"] == [{"start_time": "12:00", "end_time": "13:00", "hour": 12}]
    assert body["teacher_schedules"]["T1"] == [cls]
    assert body["room_schedules"]["R1"] == [cls]


def test_schedule_rejects_null_collections(client):
    payload = _payload()
    payload["courses"] = None
    r = client.post("/api/schedule", json=payload)
    assert r.status_code == 422


def test_schedule_rejects_missing_collections(client):
    payload = _payload()
    del payload["rooms"]
    r = client.post("/api/schedule", json=payload)
    assert r.status_code == 422


def test_schedule_drops_rows_without_ids(client):
    payload = _payload()
    payload["courses"].append({"id": "", "name": "Blank", "teacher_id": "T1"})
    payload["teachers"].append({"id": "  ", "name": "Nobody"})
    r = client.post("/api/schedule", json=payload)
    assert r.status_code == 200, r.text
    body = r.json()

    [section] = body["section_schedules"]
    assert [c["course_id"] for c in section["schedule"]] == ["C1"]
    assert set(body["teacher_schedules"]) == {"T1"}


def test_schedule_failure_returns_500(client, monkeypatch, caplog):
    def _boom(*args, **kwargs):
        raise RuntimeError("solver exploded")

    monkeypatch.setattr(schedule_routes, "generate_schedule", _boom)
    with caplog.at_level(logging.ERROR, logger="api.routes.schedule"):
        r = client.post("/api/schedule", json=_payload())

    assert r.status_code == 500
    assert r.json()["detail"] == "SCHEDULE_FAILED"
    assert any(rec.exc_info and "solver exploded" in str(rec.exc_info[1]) for rec in caplog.records)


def test_upload_schedules_workbook(client):
    r = client.post("/api/schedule/upload", files={"file": ("timetable.xlsx", _workbook_bytes(), XLSX_MIME)})
    assert r.status_code == 200, r.text
    body = r.json()

    by_section = {s["section"]: s for s in body["section_schedules"]}
    assert [(c["course_id"], c["start_time"]) for c in by_section["A"]["schedule"]] == [("C1", "7:00"), ("C2", "8:00")]
    # R1 is taken at 7 and T2 at 8.
    assert [(c["course_id"], c["start_time"]) for c in by_section["B"]["schedule"]] == [("C2", "9:00")]
    assert [c["section"] for c in body["room_schedules"]["R1"]] == ["A", "A", "B"]


def test_upload_parses_off_the_event_loop(client, monkeypatch):
    seen: dict[str, bool] = {}

    def _parse(content: bytes):
        try:
            asyncio.get_running_loop()
            seen["on_event_loop"] = True
        except RuntimeError:
            seen["on_event_loop"] = False
        return parse_excel_file(content)

    monkeypatch.setattr(schedule_routes, "parse_excel_file", _parse)
    r = client.post("/api/schedule/upload", files={"file": ("timetable.xlsx", _workbook_bytes(), XLSX_MIME)})
    assert r.status_code == 200, r.text
    assert seen == {"on_event_loop": False}


def test_upload_rejects_empty_file(client):
    r = client.post("/api/schedule/upload", files={"file": ("empty.xlsx", b"", XLSX_MIME)})
    assert r.status_code == 400
    assert r.json()["detail"] == "EMPTY_FILE"


def test_upload_requires_file(client):
    r = client.post("/api/schedule/upload")
    assert r.status_code == 400
    assert r.json()["detail"] == "NO_FILE_PROVIDED"


def test_upload_rejects_invalid_workbook(client):
    r = client.post("/api/schedule/upload", files={"file": ("x.xlsx", b"not a workbook", XLSX_MIME)})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_WORKBOOK"


def test_upload_rejects_oversized_file(client, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_mb", 1)
    big = b"0" * (1024 * 1024 + 10)
    r = client.post("/api/schedule/upload", files={"file": ("big.xlsx", big, XLSX_MIME)})
    assert r.status_code == 413
    assert r.json()["detail"] == "FILE_TOO_LARGE"


def test_google_sheets_requires_api_key(client, monkeypatch):
    monkeypatch.setattr(settings, "google_sheets_api_key", None)
    r = client.post("/api/schedule/google-sheets", json={"sheet_id": "abc"})
    assert r.status_code == 400
    assert r.json()["detail"] == "GOOGLE_SHEETS_NOT_CONFIGURED"


def test_google_sheets_schedule(client, monkeypatch):
    monkeypatch.setattr(settings, "google_sheets_api_key", "k")
    values = {
        "Students": [["ID", "Name", "Section", "Courses"], ["S1", "Ann", "A", "C1"]],
        "Courses": [["ID", "Name", "TeacherID", "Duration"], ["C1", "Maths", "T1", "1"]],
        "Teachers": [["ID", "Name", "Courses"], ["T1", "Mrs One", "C1"]],
        "Rooms": [["ID", "Name", "Type", "Capacity"], ["R1", "Room 1", "normal", "30"]],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"values": values[request.url.path.rsplit("/", 1)[-1]]})

    def _mock_client():
        with httpx.Client(transport=httpx.MockTransport(handler)) as c:
            yield c

    app.dependency_overrides[get_sheets_client] = _mock_client
    r = client.post("/api/schedule/google-sheets", json={"sheet_id": "abc"})
    assert r.status_code == 200, r.text
    [section] = r.json()["section_schedules"]
    assert [c["id"] for c in section["schedule"]] == ["A-C1-7"]
