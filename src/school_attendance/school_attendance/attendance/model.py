from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's status on one day.

    (student_id, date) is the natural key; class_instance_id is denormalized
    for class-scoped queries.
    """

    student_id: str
    class_instance_id: str
    date: date
    status: AttendanceStatus
    marked_by: Optional[str] = None
    marked_by_role: Optional[str] = None
    school_code: Optional[str] = None


@dataclass(frozen=True)
class Marker:
    """Who is committing a sheet; stamped onto every record written."""

    user_id: Optional[str]
    role_code: Optional[str] = None
    school_code: Optional[str] = None
