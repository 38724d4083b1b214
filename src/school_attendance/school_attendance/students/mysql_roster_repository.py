from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassInstance, Student
from .repository import RosterProvider


class MySQLRosterRepository(RosterProvider):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_students(self, class_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, full_name, class_instance_id, student_code
                FROM students
                WHERE class_instance_id=%s
                ORDER BY full_name ASC, student_id ASC
                """,
                (class_id,),
            )
            return [
                Student(
                    student_id=str(r["student_id"]),
                    full_name=r["full_name"],
                    class_instance_id=str(r["class_instance_id"]),
                    student_code=r.get("student_code"),
                )
                for r in fetchall(cur)
            ]

    def get_class(self, class_id: str) -> Optional[ClassInstance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_instance_id, grade, section, school_code
                FROM class_instances
                WHERE class_instance_id=%s
                """,
                (class_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClassInstance(
                class_instance_id=str(r["class_instance_id"]),
                grade=int(r["grade"]),
                section=r["section"],
                school_code=r.get("school_code"),
            )
