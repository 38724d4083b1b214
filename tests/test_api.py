from __future__ import annotations

from datetime import date

import pytest

from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.container import build_services
from src.school_attendance.school_attendance.core.enums import AttendanceStatus
from src.school_attendance.school_attendance.main import create_app


@pytest.fixture
def app(monkeypatch, roster, store):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=build_services(store, roster, saved_indicator_seconds=0))


def _login(client, role="admin"):
    with client.session_transaction() as sess:
        sess["user_id"] = "u-1"
        sess["role"] = role
        sess["school_code"] = "DEMO"


def test_requires_login(app):
    client = app.test_client()

    assert client.get("/api/classes/c-5a/attendance/2024-01-10").status_code == 401
    assert client.get("/api/students/s-1/analytics").status_code == 401


def test_students_cannot_mark(app):
    client = app.test_client()
    _login(client, role="student")

    assert client.get("/api/classes/c-5a/attendance/2024-01-10").status_code == 403


def test_submit_then_resubmit_flow(app, store):
    client = app.test_client()
    _login(client)
    url = "/api/classes/c-5a/attendance/2024-01-10"
    statuses = {"s-1": "present", "s-2": "present", "s-3": "absent"}

    first = client.post(url, json={"statuses": statuses})
    assert first.status_code == 200
    assert first.get_json()["summary"] == {"present": 2, "absent": 1, "late": 0, "total": 3}

    sheet = client.get(url).get_json()["sheet"]
    assert sheet["has_existing_attendance"] is True
    assert sheet["class_label"] == "Grade 5 - Section A"

    statuses["s-3"] = "late"
    pending = client.post(url, json={"statuses": statuses})
    assert pending.status_code == 409
    assert pending.get_json()["outcome"] == "resubmit_required"

    done = client.post(url, json={"statuses": statuses, "confirm_resubmit": True})
    assert done.status_code == 200
    assert sorted((r.student_id, r.status.value) for r in store.records) == [
        ("s-1", "present"),
        ("s-2", "present"),
        ("s-3", "late"),
    ]


def test_incomplete_sheet_returns_400(app, store):
    client = app.test_client()
    _login(client)

    resp = client.post("/api/classes/c-5a/attendance/2024-01-10", json={"statuses": {"s-1": "present"}})

    assert resp.status_code == 400
    assert resp.get_json()["unmarked"] == 2
    assert store.replace_calls == 0


def test_bad_date_and_store_failure(app, store):
    client = app.test_client()
    _login(client)

    assert client.get("/api/classes/c-5a/attendance/10-01-2024").status_code == 400

    store.fail_on_read = True
    assert client.get("/api/classes/c-5a/attendance/2024-01-10").status_code == 503


def test_student_analytics_and_csv(app, store):
    store.records = [
        AttendanceRecord(student_id="s-1", class_instance_id="c-5a", date=date(2024, 1, d), status=s)
        for d, s in [(8, AttendanceStatus.PRESENT), (9, AttendanceStatus.ABSENT), (10, AttendanceStatus.LATE)]
    ]
    client = app.test_client()
    _login(client, role="student")

    data = client.get("/api/students/s-1/analytics?start=2024-01-01&end=2024-01-31").get_json()
    assert data["rate"] == 67
    assert data["current_streak"] == 1
    assert data["best_streak"] == 1
    assert len(data["daily"]) == 3

    calendar = client.get("/api/students/s-1/calendar?date=2024-01-10&mode=week").get_json()
    assert calendar["totals"]["no_data_days"] == 4

    csv_resp = client.get("/api/students/s-1/attendance.csv?date=2024-01-10&mode=month")
    assert csv_resp.headers["Content-Disposition"].endswith("attendance_month_2024-01.csv")
    assert csv_resp.data.decode("utf-8-sig").splitlines()[1] == "2024-01-08,present"


def test_class_analytics_unknown_class_is_404(app):
    client = app.test_client()
    _login(client)

    assert client.get("/api/classes/nope/analytics").status_code == 404
    assert client.get("/api/analytics/classes?ids=c-5a,c-5b").status_code == 200


def test_class_rollups_workbook(app, store):
    store.records = [
        AttendanceRecord(student_id="s-1", class_instance_id="c-5a", date=date(2024, 1, 8), status=AttendanceStatus.PRESENT)
    ]
    client = app.test_client()
    _login(client)

    resp = client.get("/api/classes/c-5a/rollups.xlsx?start=2024-01-01&end=2024-01-31")

    assert resp.status_code == 200
    assert resp.data[:2] == b"PK"
