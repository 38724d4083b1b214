from datetime import date

import pytest

from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.attendance.repository import validate_day_sheet
from src.school_attendance.school_attendance.core.enums import AttendanceStatus
from src.school_attendance.school_attendance.core.exceptions import ValidationError

DAY = date(2024, 1, 10)


def _rec(student_id="s-1", class_id="c-5a", on_date=DAY):
    return AttendanceRecord(student_id=student_id, class_instance_id=class_id, date=on_date, status=AttendanceStatus.PRESENT)


def test_accepts_one_record_per_student():
    validate_day_sheet("c-5a", DAY, [_rec("s-1"), _rec("s-2")])


def test_rejects_duplicate_student():
    with pytest.raises(ValidationError):
        validate_day_sheet("c-5a", DAY, [_rec("s-1"), _rec("s-1")])


def test_rejects_record_for_other_class_or_day():
    with pytest.raises(ValidationError):
        validate_day_sheet("c-5a", DAY, [_rec(class_id="c-5b")])
    with pytest.raises(ValidationError):
        validate_day_sheet("c-5a", DAY, [_rec(on_date=date(2024, 1, 11))])


def test_failed_replace_leaves_store_untouched(store):
    store.records = [_rec("s-9")]

    with pytest.raises(ValidationError):
        store.replace_day("c-5a", DAY, [_rec("s-1"), _rec("s-1")])

    assert [r.student_id for r in store.records] == ["s-9"]
