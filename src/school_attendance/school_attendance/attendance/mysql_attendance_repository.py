from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceRecord
from .repository import AttendanceRepository, validate_day_sheet

logger = logging.getLogger(__name__)

_COLUMNS = "student_id, class_instance_id, date, status, marked_by, marked_by_role_code, school_code"


def _to_record(r: dict) -> Optional[AttendanceRecord]:
    """Map a row; rows with a status outside present/absent/late are skipped."""
    try:
        status = AttendanceStatus(r["status"])
    except ValueError:
        logger.warning(
            "Skipping attendance row for student %s on %s: unknown status %r",
            r.get("student_id"),
            r.get("date"),
            r.get("status"),
        )
        return None
    return AttendanceRecord(
        student_id=str(r["student_id"]),
        class_instance_id=str(r["class_instance_id"]),
        date=r["date"],
        status=status,
        marked_by=r.get("marked_by"),
        marked_by_role=r.get("marked_by_role_code"),
        school_code=r.get("school_code"),
    )


def _to_records(rows: Iterable[dict]) -> list[AttendanceRecord]:
    return [rec for rec in map(_to_record, rows) if rec is not None]


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_by_class_and_date(self, class_id: str, on_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE class_instance_id=%s AND date=%s
                ORDER BY student_id ASC
                """,
                (class_id, on_date),
            )
            return _to_records(fetchall(cur))

    def list_by_class_and_range(self, class_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE class_instance_id=%s AND date BETWEEN %s AND %s
                ORDER BY date ASC, student_id ASC
                """,
                (class_id, start_date, end_date),
            )
            return _to_records(fetchall(cur))

    def list_by_student_and_range(self, student_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE student_id=%s AND date BETWEEN %s AND %s
                ORDER BY date ASC
                """,
                (student_id, start_date, end_date),
            )
            return _to_records(fetchall(cur))

    def replace_day(self, class_id: str, on_date: date, records: Sequence[AttendanceRecord]) -> None:
        validate_day_sheet(class_id, on_date, records)

        # Delete and insert share one connection and commit together.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance WHERE class_instance_id=%s AND date=%s",
                (class_id, on_date),
            )
            deleted = cur.rowcount
            if records:
                cur.executemany(
                    f"""
                    INSERT INTO attendance({_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    [
                        (
                            r.student_id,
                            r.class_instance_id,
                            r.date,
                            r.status.value,
                            r.marked_by,
                            r.marked_by_role,
                            r.school_code,
                        )
                        for r in records
                    ],
                )
        logger.info(
            "Replaced attendance for class %s on %s (%d removed, %d written)",
            class_id,
            on_date.isoformat(),
            deleted,
            len(records),
        )
