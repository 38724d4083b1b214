from __future__ import annotations

import asyncio
from datetime import date

from src.school_attendance.school_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.school_attendance.school_attendance.attendance.session import MarkingSession
from src.school_attendance.school_attendance.core.enums import AlertLevel, AttendanceStatus, MarkState
from src.school_attendance.school_attendance.core.exceptions import LoadFailure

DAY = date(2024, 1, 10)


class FakeCursor:
    def __init__(self, rows):
        self._rows = rows
        self.executed = []
        self.rowcount = 0

    def execute(self, sql, params=None):
        self.executed.append((sql, params))

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, rows):
        self.cursor_obj = FakeCursor(rows)
        self.committed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, rows):
        self.rows = rows

    def connect(self):
        return FakeConnection(self.rows)


def _row(student_id: str, status: str) -> dict:
    return {
        "student_id": student_id,
        "class_instance_id": "c-5a",
        "date": DAY,
        "status": status,
        "marked_by": "u-1",
        "marked_by_role_code": "admin",
        "school_code": "DEMO",
    }


def test_rows_with_unknown_status_are_skipped():
    repo = MySQLAttendanceRepository(FakeConnectionFactory([_row("s-1", "present"), _row("s-2", "excused")]))

    records = repo.list_by_class_and_date("c-5a", DAY)

    assert [(r.student_id, r.status) for r in records] == [("s-1", AttendanceStatus.PRESENT)]
    assert records[0].marked_by_role == "admin"


def test_session_loads_over_store_with_unknown_status(roster, marker):
    repo = MySQLAttendanceRepository(FakeConnectionFactory([_row("s-1", "late"), _row("s-2", "excused")]))
    session = MarkingSession(roster, repo, marker)

    assert asyncio.run(session.load("c-5a", DAY)) is True

    assert session.is_loading is False
    assert session.state_of("s-1") is MarkState.LATE
    assert session.state_of("s-2") is MarkState.UNMARKED
    assert session.has_existing_attendance is True


def test_unexpected_store_error_becomes_load_failure(roster, store, marker):
    def broken(class_id, on_date):
        raise ValueError("'excused' is not a valid AttendanceStatus")

    store.list_by_class_and_date = broken
    session = MarkingSession(roster, store, marker)

    assert asyncio.run(session.load("c-5a", DAY)) is False

    assert session.is_loading is False
    assert isinstance(session.last_error, LoadFailure)
    assert session.alert.level is AlertLevel.ERROR
    assert set(session.states.values()) == {MarkState.UNMARKED}
    assert session.can_submit is False
