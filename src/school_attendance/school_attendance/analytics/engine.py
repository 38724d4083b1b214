"""Pure attendance aggregations.

Every function takes an in-memory iterable of records and never mutates it,
performs I/O, or raises on bad input: a record with an unknown status or
without a usable date is left out of every count.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..core.constants import ATTENTION_RATE, DEFAULT_LEADERBOARD_SIZE, DEFAULT_TREND_DAYS, DEFAULT_WEEK_START
from ..core.enums import AttendanceStatus, PerformanceBand, RollupPeriod
from ..students.model import ClassInstance, Student
from .classifier import DEFAULT_CLASSIFIER, PerformanceClassifier
from .factory import BucketStrategyFactory
from .model import (
    AttendanceSummary,
    BandSlice,
    ClassComparison,
    ClassOverview,
    ClassPerformance,
    DistributionSlice,
    RollupBucket,
    StatusCounts,
    StudentPerformance,
    TrendPoint,
    rate_from_counts,
)


@dataclass(frozen=True)
class _Mark:
    date: date
    status: AttendanceStatus
    student_id: Optional[str]
    class_instance_id: Optional[str]


def _coerce_status(value: Any) -> Optional[AttendanceStatus]:
    if isinstance(value, AttendanceStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return AttendanceStatus(value)
    except ValueError:
        return None


def _coerce_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _clean(records: Iterable[Any]) -> list[_Mark]:
    """Valid records in chronological order (stable for equal dates)."""
    marks: list[_Mark] = []
    for r in records or ():
        status = _coerce_status(getattr(r, "status", None))
        day = _coerce_date(getattr(r, "date", None))
        if status is None or day is None:
            continue
        marks.append(
            _Mark(
                date=day,
                status=status,
                student_id=getattr(r, "student_id", None),
                class_instance_id=getattr(r, "class_instance_id", None),
            )
        )
    marks.sort(key=lambda m: m.date)
    return marks


def _count(marks: Iterable[_Mark]) -> StatusCounts:
    present = absent = late = 0
    for m in marks:
        if m.status is AttendanceStatus.PRESENT:
            present += 1
        elif m.status is AttendanceStatus.ABSENT:
            absent += 1
        else:
            late += 1
    return StatusCounts(present=present, absent=absent, late=late)


def _current_streak(marks: Sequence[_Mark]) -> int:
    streak = 0
    for m in reversed(marks):
        if not m.status.is_attended:
            break
        streak += 1
    return streak


def _best_streak(marks: Sequence[_Mark]) -> int:
    best = run = 0
    for m in marks:
        if m.status.is_attended:
            run += 1
            if run > best:
                best = run
        else:
            run = 0
    return best


# ----------------------------------------------------------------------
# Single-scope metrics
# ----------------------------------------------------------------------
def count_statuses(records: Iterable[Any]) -> StatusCounts:
    return _count(_clean(records))


def attendance_rate(records: Iterable[Any]) -> int:
    """Percentage of records that are present or late, rounded; 0 for no records."""
    return count_statuses(records).rate


def status_distribution(records: Iterable[Any]) -> list[DistributionSlice]:
    counts = count_statuses(records)
    return [
        DistributionSlice(status=status, count=counts.of(status))
        for status in (AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.LATE)
        if counts.of(status) > 0
    ]


def current_streak(records: Iterable[Any]) -> int:
    """Attended records counted back from the most recent one."""
    return _current_streak(_clean(records))


def best_streak(records: Iterable[Any]) -> int:
    return _best_streak(_clean(records))


def rollup(
    records: Iterable[Any],
    period: RollupPeriod | str,
    *,
    first_weekday: int = DEFAULT_WEEK_START,
) -> list[RollupBucket]:
    """Group records by day, week or month.

    Only buckets that contain at least one record are returned, oldest first.
    """

    strategy = BucketStrategyFactory(first_weekday=first_weekday).for_period(period)

    grouped: "OrderedDict[date, list[_Mark]]" = OrderedDict()
    for m in _clean(records):
        grouped.setdefault(strategy.key_for(m.date), []).append(m)

    return [
        RollupBucket(period=strategy.period, key=key, label=strategy.label_for(key), counts=_count(marks))
        for key, marks in sorted(grouped.items())
    ]


def daily_rollup(records: Iterable[Any]) -> list[RollupBucket]:
    return rollup(records, RollupPeriod.DAY)


def weekly_rollup(records: Iterable[Any], *, first_weekday: int = DEFAULT_WEEK_START) -> list[RollupBucket]:
    return rollup(records, RollupPeriod.WEEK, first_weekday=first_weekday)


def monthly_rollup(records: Iterable[Any]) -> list[RollupBucket]:
    return rollup(records, RollupPeriod.MONTH)


def recent_trend(records: Iterable[Any], days: int = DEFAULT_TREND_DAYS) -> list[TrendPoint]:
    """The last ``days`` records as 100 (attended) / 0 (absent) points."""
    if days <= 0:
        return []
    marks = _clean(records)[-days:]
    return [TrendPoint(date=m.date, rate=100 if m.status.is_attended else 0) for m in marks]


def streak_badge(streak: int) -> str:
    if streak >= 10:
        return "Amazing!"
    if streak >= 7:
        return "Great!"
    if streak >= 5:
        return "Good!"
    return "Keep going!"


def summarize(
    records: Iterable[Any],
    *,
    first_weekday: int = DEFAULT_WEEK_START,
    classifier: PerformanceClassifier = DEFAULT_CLASSIFIER,
    trend_days: int = DEFAULT_TREND_DAYS,
) -> AttendanceSummary:
    records = list(records or ())
    counts = count_statuses(records)
    return AttendanceSummary(
        counts=counts,
        rate=counts.rate,
        band=classifier.classify(counts.rate),
        current_streak=current_streak(records),
        best_streak=best_streak(records),
        distribution=status_distribution(records),
        daily=rollup(records, RollupPeriod.DAY),
        weekly=rollup(records, RollupPeriod.WEEK, first_weekday=first_weekday),
        monthly=rollup(records, RollupPeriod.MONTH),
        trend=recent_trend(records, trend_days),
    )


# ----------------------------------------------------------------------
# Multi-student / multi-class views
# ----------------------------------------------------------------------
def student_performance(
    records: Iterable[Any],
    students: Sequence[Student],
    *,
    classifier: PerformanceClassifier = DEFAULT_CLASSIFIER,
) -> list[StudentPerformance]:
    """Per-student totals, rate, streak and band, best rate first.

    Students without records are included with a rate of 0.
    """

    by_student: dict[str, list[_Mark]] = {s.student_id: [] for s in students}
    for m in _clean(records):
        if m.student_id in by_student:
            by_student[m.student_id].append(m)

    rows = []
    for s in students:
        marks = by_student[s.student_id]
        counts = _count(marks)
        rows.append(
            StudentPerformance(
                student_id=s.student_id,
                full_name=s.full_name,
                student_code=s.student_code,
                counts=counts,
                rate=counts.rate,
                current_streak=_current_streak(marks),
                band=classifier.classify(counts.rate),
            )
        )
    rows.sort(key=lambda p: p.rate, reverse=True)
    return rows


def band_distribution(performances: Iterable[StudentPerformance | ClassPerformance]) -> list[BandSlice]:
    tally = {band: 0 for band in PerformanceBand}
    for p in performances:
        tally[p.band] += 1
    return [BandSlice(band=band, count=count) for band, count in tally.items() if count > 0]


def class_overview(
    performances: Sequence[StudentPerformance],
    *,
    leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE,
) -> ClassOverview:
    ranked = sorted(performances, key=lambda p: p.rate, reverse=True)
    total = len(ranked)
    average = rate_from_counts(sum(p.rate for p in ranked), total * 100)
    return ClassOverview(
        total_students=total,
        average_rate=average,
        band_distribution=band_distribution(ranked),
        top_performers=ranked[:leaderboard_size],
        needs_attention=[p for p in ranked if p.rate < ATTENTION_RATE][:leaderboard_size],
    )


def class_comparison(
    records: Iterable[Any],
    classes: Sequence[ClassInstance],
    *,
    classifier: PerformanceClassifier = DEFAULT_CLASSIFIER,
) -> ClassComparison:
    by_class: dict[str, list[_Mark]] = {c.class_instance_id: [] for c in classes}
    for m in _clean(records):
        if m.class_instance_id in by_class:
            by_class[m.class_instance_id].append(m)

    ranking = []
    for c in classes:
        counts = _count(by_class[c.class_instance_id])
        ranking.append(
            ClassPerformance(
                class_instance_id=c.class_instance_id,
                label=c.label,
                counts=counts,
                rate=counts.rate,
                band=classifier.classify(counts.rate),
            )
        )
    ranking.sort(key=lambda c: c.rate, reverse=True)

    total = len(ranking)
    return ClassComparison(
        ranking=ranking,
        average_rate=rate_from_counts(sum(c.rate for c in ranking), total * 100),
        best=ranking[0] if ranking else None,
        worst=ranking[-1] if ranking else None,
    )
