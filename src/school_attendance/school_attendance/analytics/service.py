from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_WEEK_START
from ..core.enums import RollupPeriod
from ..core.exceptions import NotFoundError
from ..reports.calendar import CalendarDay, CalendarTotals, calendar_totals, fill_date_range, view_window
from ..students.repository import RosterProvider
from . import engine
from .classifier import DEFAULT_CLASSIFIER, PerformanceClassifier
from .model import AttendanceSummary, ClassComparison, ClassOverview, StudentPerformance


@dataclass(frozen=True)
class ClassAnalytics:
    summary: AttendanceSummary
    students: list[StudentPerformance]
    overview: ClassOverview


@dataclass(frozen=True)
class CalendarView:
    start: date
    end: date
    days: list[CalendarDay]
    totals: CalendarTotals


class AnalyticsService:
    """Fetches a record window and hands it to the pure engine."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterProvider,
        *,
        first_weekday: int = DEFAULT_WEEK_START,
        classifier: PerformanceClassifier | None = None,
    ):
        self._attendance = attendance
        self._roster = roster
        self._first_weekday = int(first_weekday)
        self._classifier = classifier or DEFAULT_CLASSIFIER

    def student_records(self, student_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        require_date_range(start, end)
        return self._attendance.list_by_student_and_range(student_id, start, end)

    def class_records(self, class_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        require_date_range(start, end)
        return self._attendance.list_by_class_and_range(class_id, start, end)

    def student_summary(self, student_id: str, *, start: date, end: date) -> AttendanceSummary:
        records = self.student_records(student_id, start=start, end=end)
        return engine.summarize(records, first_weekday=self._first_weekday, classifier=self._classifier)

    def class_summary(self, class_id: str, *, start: date, end: date) -> ClassAnalytics:
        if self._roster.get_class(class_id) is None:
            raise NotFoundError(f"Class {class_id} not found")

        records = self.class_records(class_id, start=start, end=end)
        students = self._roster.list_students(class_id)
        performances = engine.student_performance(records, students, classifier=self._classifier)
        return ClassAnalytics(
            summary=engine.summarize(records, first_weekday=self._first_weekday, classifier=self._classifier),
            students=performances,
            overview=engine.class_overview(performances),
        )

    def compare_classes(self, class_ids: Sequence[str], *, start: date, end: date) -> ClassComparison:
        classes = []
        records: list[AttendanceRecord] = []
        for class_id in class_ids:
            class_instance = self._roster.get_class(class_id)
            if class_instance is None:
                raise NotFoundError(f"Class {class_id} not found")
            classes.append(class_instance)
            records.extend(self.class_records(class_id, start=start, end=end))
        return engine.class_comparison(records, classes, classifier=self._classifier)

    def student_calendar(self, student_id: str, *, anchor: date, mode: RollupPeriod | str) -> CalendarView:
        start, end = view_window(anchor, mode, first_weekday=self._first_weekday)
        days = fill_date_range(self.student_records(student_id, start=start, end=end), start, end)
        return CalendarView(start=start, end=end, days=days, totals=calendar_totals(days))
