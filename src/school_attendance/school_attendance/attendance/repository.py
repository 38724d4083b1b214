from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from ..core.exceptions import ValidationError
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store interface.

    Range bounds are inclusive; results are ordered by date, then student.
    """

    def list_by_class_and_date(self, class_id: str, on_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_class_and_range(self, class_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_student_and_range(self, student_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def replace_day(self, class_id: str, on_date: date, records: Sequence[AttendanceRecord]) -> None:
        """Delete every record for (class, date) and insert ``records``.

        Must be atomic: on any error nothing changes.
        """

        raise NotImplementedError


def validate_day_sheet(class_id: str, on_date: date, records: Sequence[AttendanceRecord]) -> None:
    """Write-time checks shared by every replace_day implementation."""

    seen: set[str] = set()
    for r in records:
        if r.class_instance_id != class_id or r.date != on_date:
            raise ValidationError(
                f"Record for student {r.student_id} does not belong to class {class_id} on {on_date.isoformat()}"
            )
        if r.student_id in seen:
            raise ValidationError(f"Duplicate record for student {r.student_id} on {on_date.isoformat()}")
        seen.add(r.student_id)
