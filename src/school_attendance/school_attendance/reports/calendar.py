"""Continuous date ranges for display.

Days without a record are filled with ``no-data``. This lives outside the
analytics engine: synthesized days must never feed rates or streaks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from ..common.datetime_utils import end_of_month, iter_days, start_of_month, start_of_week
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_WEEK_START
from ..core.enums import CalendarStatus, RollupPeriod
from ..attendance.model import AttendanceRecord
from ..analytics.model import rate_from_counts


@dataclass(frozen=True)
class CalendarDay:
    date: date
    status: CalendarStatus

    @property
    def is_placeholder(self) -> bool:
        return self.status is CalendarStatus.NO_DATA


@dataclass(frozen=True)
class CalendarTotals:
    total: int
    present: int
    absent: int
    late: int
    rate: int
    total_days: int
    no_data_days: int


def view_window(anchor: date, mode: RollupPeriod | str, *, first_weekday: int = DEFAULT_WEEK_START) -> tuple[date, date]:
    """Start and end of the day, week or month containing ``anchor``."""
    mode = RollupPeriod(mode)
    if mode is RollupPeriod.DAY:
        return anchor, anchor
    if mode is RollupPeriod.WEEK:
        start = start_of_week(anchor, first_weekday=first_weekday)
        return start, date.fromordinal(start.toordinal() + 6)
    return start_of_month(anchor), end_of_month(anchor)


def fill_date_range(records: Iterable[AttendanceRecord], start: date, end: date) -> list[CalendarDay]:
    """One entry per day from start to end; expects one student's records."""
    require_date_range(start, end)
    by_day: dict[date, CalendarStatus] = {}
    for r in records:
        if start <= r.date <= end:
            by_day[r.date] = CalendarStatus(r.status.value)
    return [CalendarDay(date=d, status=by_day.get(d, CalendarStatus.NO_DATA)) for d in iter_days(start, end)]


def calendar_totals(days: Iterable[CalendarDay]) -> CalendarTotals:
    days = list(days)
    present = sum(1 for d in days if d.status is CalendarStatus.PRESENT)
    absent = sum(1 for d in days if d.status is CalendarStatus.ABSENT)
    late = sum(1 for d in days if d.status is CalendarStatus.LATE)
    total = present + absent + late
    return CalendarTotals(
        total=total,
        present=present,
        absent=absent,
        late=late,
        rate=rate_from_counts(present + late, total),
        total_days=len(days),
        no_data_days=len(days) - total,
    )
