from __future__ import annotations

import threading
from datetime import date
from typing import Optional

import pytest

from src.school_attendance.school_attendance.attendance.model import AttendanceRecord, Marker
from src.school_attendance.school_attendance.attendance.repository import validate_day_sheet
from src.school_attendance.school_attendance.core.exceptions import RepositoryError
from src.school_attendance.school_attendance.students.model import ClassInstance, Student


class InMemoryRoster:
    def __init__(self, classes, students):
        self.classes = {c.class_instance_id: c for c in classes}
        self.students = list(students)
        self.fail = False
        # class_id -> Event the roster waits on before answering
        self.gates: dict[str, threading.Event] = {}

    def list_students(self, class_id: str):
        gate = self.gates.get(class_id)
        if gate is not None:
            gate.wait(timeout=5)
        if self.fail:
            raise RepositoryError("roster offline")
        return [s for s in self.students if s.class_instance_id == class_id]

    def get_class(self, class_id: str) -> Optional[ClassInstance]:
        if self.fail:
            raise RepositoryError("roster offline")
        return self.classes.get(class_id)


class InMemoryAttendance:
    def __init__(self, records=()):
        self.records: list[AttendanceRecord] = list(records)
        self.fail_on_read = False
        self.fail_on_replace = False
        self.replace_calls = 0

    def list_by_class_and_date(self, class_id: str, on_date: date):
        if self.fail_on_read:
            raise RepositoryError("store offline")
        return self._sorted(r for r in self.records if r.class_instance_id == class_id and r.date == on_date)

    def list_by_class_and_range(self, class_id: str, start_date: date, end_date: date):
        return self._sorted(r for r in self.records if r.class_instance_id == class_id and start_date <= r.date <= end_date)

    def list_by_student_and_range(self, student_id: str, start_date: date, end_date: date):
        return self._sorted(r for r in self.records if r.student_id == student_id and start_date <= r.date <= end_date)

    def replace_day(self, class_id: str, on_date: date, records):
        self.replace_calls += 1
        if self.fail_on_replace:
            raise RepositoryError("write rejected")
        validate_day_sheet(class_id, on_date, records)
        kept = [r for r in self.records if not (r.class_instance_id == class_id and r.date == on_date)]
        self.records = kept + list(records)

    @staticmethod
    def _sorted(records):
        return sorted(records, key=lambda r: (r.date, r.student_id))


CLASS_5A = ClassInstance(class_instance_id="c-5a", grade=5, section="A")
CLASS_5B = ClassInstance(class_instance_id="c-5b", grade=5, section="B")
CLASS_6A = ClassInstance(class_instance_id="c-6a", grade=6, section="A")


@pytest.fixture
def roster():
    return InMemoryRoster(
        [CLASS_5A, CLASS_5B, CLASS_6A],
        [
            Student(student_id="s-1", full_name="Asha", class_instance_id="c-5a", student_code="A-1"),
            Student(student_id="s-2", full_name="Bilal", class_instance_id="c-5a", student_code="A-2"),
            Student(student_id="s-3", full_name="Chen", class_instance_id="c-5a", student_code="A-3"),
            Student(student_id="s-4", full_name="Dara", class_instance_id="c-5b", student_code="B-1"),
        ],
    )


@pytest.fixture
def store():
    return InMemoryAttendance()


@pytest.fixture
def marker():
    return Marker(user_id="u-1", role_code="admin", school_code="DEMO")
