from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: an enrolled student.

    Owned by the roster system; read-only here.
    """

    student_id: str
    full_name: str
    class_instance_id: str
    student_code: Optional[str] = None


@dataclass(frozen=True)
class ClassInstance:
    class_instance_id: str
    grade: int
    section: str
    school_code: Optional[str] = None

    @property
    def label(self) -> str:
        return f"Grade {self.grade} - Section {self.section}"
