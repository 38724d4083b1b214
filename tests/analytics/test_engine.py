from __future__ import annotations

from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from src.school_attendance.school_attendance.analytics import engine
from src.school_attendance.school_attendance.analytics.classifier import ThresholdClassifier, classify_rate
from src.school_attendance.school_attendance.analytics.model import rate_from_counts
from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, PerformanceBand, RollupPeriod
from src.school_attendance.school_attendance.students.model import ClassInstance, Student

P, A, L = AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.LATE


def _series(statuses, start=date(2024, 1, 1), student_id="s-1", class_id="c-5a"):
    return [
        AttendanceRecord(student_id=student_id, class_instance_id=class_id, date=start + timedelta(days=i), status=s)
        for i, s in enumerate(statuses)
    ]


def test_rate_rounds_half_up_and_handles_empty():
    assert rate_from_counts(0, 0) == 0
    assert rate_from_counts(2, 3) == 67
    assert rate_from_counts(1, 3) == 33
    assert rate_from_counts(1, 8) == 13
    assert rate_from_counts(3, 3) == 100


def test_late_counts_as_attended():
    records = _series([P, L, A, A])

    counts = engine.count_statuses(records)

    assert (counts.present, counts.absent, counts.late, counts.total) == (1, 2, 1, 4)
    assert engine.attendance_rate(records) == 50


def test_streaks_follow_chronological_order():
    records = _series([P, P, A, P])

    assert engine.current_streak(records) == 1
    assert engine.best_streak(records) == 2
    # input order must not matter
    assert engine.current_streak(list(reversed(records))) == 1


def test_streaks_for_empty_and_all_attended():
    assert engine.current_streak([]) == 0
    assert engine.best_streak([]) == 0

    records = _series([P, L, P, L, P])
    assert engine.current_streak(records) == 5
    assert engine.best_streak(records) == 5


def test_distribution_omits_zero_slices():
    slices = engine.status_distribution(_series([P, P, A]))

    assert [(s.label, s.count) for s in slices] == [("Present", 2), ("Absent", 1)]
    assert engine.status_distribution([]) == []


def test_daily_rollup_has_no_empty_buckets():
    # 10 calendar days, records on 6 of them
    start = date(2024, 1, 1)
    days = [0, 1, 3, 5, 8, 9]
    records = [
        AttendanceRecord(student_id="s-1", class_instance_id="c-5a", date=start + timedelta(days=d), status=P) for d in days
    ]

    buckets = engine.daily_rollup(records)

    assert len(buckets) == 6
    assert [b.key for b in buckets] == [start + timedelta(days=d) for d in days]
    assert buckets[0].label == "Jan 01"


def test_weekly_rollup_respects_first_weekday():
    records = [
        AttendanceRecord(student_id="s-1", class_instance_id="c-5a", date=date(2024, 1, 5), status=P),
        AttendanceRecord(student_id="s-1", class_instance_id="c-5a", date=date(2024, 1, 8), status=A),
        AttendanceRecord(student_id="s-1", class_instance_id="c-5a", date=date(2024, 1, 14), status=L),
    ]

    monday = engine.weekly_rollup(records)
    sunday = engine.weekly_rollup(records, first_weekday=6)

    assert [(b.key, b.total) for b in monday] == [(date(2024, 1, 1), 1), (date(2024, 1, 8), 2)]
    assert [b.key for b in sunday] == [date(2023, 12, 31), date(2024, 1, 7), date(2024, 1, 14)]


def test_monthly_rollup_counts_and_rate():
    records = _series([P, A, L], start=date(2024, 1, 30))

    buckets = engine.monthly_rollup(records)

    assert [(b.label, b.total, b.rate) for b in buckets] == [("Jan 2024", 2, 50), ("Feb 2024", 1, 100)]


def test_rollup_totals_match_overall_counts():
    records = _series([P, A, L, P, A, P, P, L, A, P] * 4)
    overall = engine.count_statuses(records)

    for period in RollupPeriod:
        buckets = engine.rollup(records, period)
        assert sum(b.total for b in buckets) == overall.total
        assert sum(b.present for b in buckets) == overall.present


def test_malformed_records_are_skipped():
    good = _series([P, A])
    bad = [
        SimpleNamespace(date=date(2024, 2, 1), status="excused"),
        SimpleNamespace(date=None, status="present"),
        SimpleNamespace(date="2024-02-03", status="present"),
    ]

    counts = engine.count_statuses(good + bad)

    assert counts.total == 2
    assert engine.current_streak(good + bad) == 0


def test_datetime_and_plain_string_statuses_are_accepted():
    records = [SimpleNamespace(date=datetime(2024, 1, 1, 9, 30), status="late")]

    assert engine.daily_rollup(records)[0].key == date(2024, 1, 1)
    assert engine.attendance_rate(records) == 100


def test_aggregation_is_idempotent_and_does_not_mutate_input():
    records = _series([A, P, L, P])
    snapshot = list(records)

    first = engine.summarize(records)
    second = engine.summarize(records)

    assert first == second
    assert records == snapshot


def test_recent_trend_uses_last_records():
    records = _series([A, P, P, A, P, L, A, P, P])

    trend = engine.recent_trend(records, days=3)

    assert [t.rate for t in trend] == [0, 100, 100]
    assert engine.recent_trend(records, days=0) == []


@pytest.mark.parametrize(
    "rate,band",
    [
        (100, PerformanceBand.EXCELLENT),
        (90, PerformanceBand.EXCELLENT),
        (89, PerformanceBand.GOOD),
        (75, PerformanceBand.GOOD),
        (74, PerformanceBand.FAIR),
        (60, PerformanceBand.FAIR),
        (59, PerformanceBand.POOR),
        (0, PerformanceBand.POOR),
    ],
)
def test_band_lower_bounds_are_inclusive(rate, band):
    assert classify_rate(rate) is band


def test_custom_thresholds_and_alert_labels():
    strict = ThresholdClassifier(excellent=95, good=85, fair=70)

    assert strict.classify(90) is PerformanceBand.GOOD
    assert PerformanceBand.FAIR.alert_label == "warning"
    assert PerformanceBand.POOR.alert_label == "critical"
    assert PerformanceBand.GOOD.alert_label == "good"


def test_streak_badges():
    assert engine.streak_badge(10) == "Amazing!"
    assert engine.streak_badge(7) == "Great!"
    assert engine.streak_badge(5) == "Good!"
    assert engine.streak_badge(4) == "Keep going!"


def test_student_performance_includes_students_without_records():
    students = [
        Student(student_id="s-1", full_name="Asha", class_instance_id="c-5a"),
        Student(student_id="s-2", full_name="Bilal", class_instance_id="c-5a"),
        Student(student_id="s-3", full_name="Chen", class_instance_id="c-5a"),
    ]
    records = _series([P, P, P, P], student_id="s-1") + _series([P, A, A, L], student_id="s-2")

    rows = engine.student_performance(records, students)

    assert [(r.student_id, r.rate, r.band) for r in rows] == [
        ("s-1", 100, PerformanceBand.EXCELLENT),
        ("s-2", 50, PerformanceBand.POOR),
        ("s-3", 0, PerformanceBand.POOR),
    ]
    assert rows[1].current_streak == 1

    overview = engine.class_overview(rows)
    assert overview.total_students == 3
    assert overview.average_rate == 50
    assert [p.student_id for p in overview.needs_attention] == ["s-2", "s-3"]
    assert {(b.band, b.count) for b in overview.band_distribution} == {
        (PerformanceBand.EXCELLENT, 1),
        (PerformanceBand.POOR, 2),
    }


def test_class_comparison_ranks_best_first():
    classes = [
        ClassInstance(class_instance_id="c-5a", grade=5, section="A"),
        ClassInstance(class_instance_id="c-5b", grade=5, section="B"),
    ]
    records = _series([P, A, A, A], class_id="c-5a") + _series([P, P, P, L], student_id="s-4", class_id="c-5b")

    comparison = engine.class_comparison(records, classes)

    assert [c.class_instance_id for c in comparison.ranking] == ["c-5b", "c-5a"]
    assert comparison.best.label == "Grade 5 - Section B"
    assert comparison.worst.rate == 25
    assert comparison.average_rate == 63


def test_class_comparison_with_no_classes():
    comparison = engine.class_comparison([], [])

    assert comparison.ranking == []
    assert comparison.best is None
    assert comparison.average_rate == 0
