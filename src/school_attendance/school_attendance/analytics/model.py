from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus, PerformanceBand, RollupPeriod


def rate_from_counts(attended: int, total: int) -> int:
    """round(100 * attended / total), halves rounded up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (200 * attended + total) // (2 * total)


@dataclass(frozen=True)
class StatusCounts:
    present: int = 0
    absent: int = 0
    late: int = 0

    @property
    def total(self) -> int:
        return self.present + self.absent + self.late

    @property
    def attended(self) -> int:
        return self.present + self.late

    @property
    def rate(self) -> int:
        return rate_from_counts(self.attended, self.total)

    def of(self, status: AttendanceStatus) -> int:
        return getattr(self, status.value)


@dataclass(frozen=True)
class DistributionSlice:
    status: AttendanceStatus
    count: int

    @property
    def label(self) -> str:
        return self.status.value.capitalize()


@dataclass(frozen=True)
class RollupBucket:
    """Counts for one day, week or month that has at least one record."""

    period: RollupPeriod
    key: date
    label: str
    counts: StatusCounts

    @property
    def present(self) -> int:
        return self.counts.present

    @property
    def absent(self) -> int:
        return self.counts.absent

    @property
    def late(self) -> int:
        return self.counts.late

    @property
    def total(self) -> int:
        return self.counts.total

    @property
    def rate(self) -> int:
        return self.counts.rate


@dataclass(frozen=True)
class TrendPoint:
    date: date
    rate: int


@dataclass(frozen=True)
class AttendanceSummary:
    counts: StatusCounts
    rate: int
    band: PerformanceBand
    current_streak: int
    best_streak: int
    distribution: list[DistributionSlice] = field(default_factory=list)
    daily: list[RollupBucket] = field(default_factory=list)
    weekly: list[RollupBucket] = field(default_factory=list)
    monthly: list[RollupBucket] = field(default_factory=list)
    trend: list[TrendPoint] = field(default_factory=list)


@dataclass(frozen=True)
class StudentPerformance:
    student_id: str
    full_name: str
    student_code: Optional[str]
    counts: StatusCounts
    rate: int
    current_streak: int
    band: PerformanceBand


@dataclass(frozen=True)
class BandSlice:
    band: PerformanceBand
    count: int


@dataclass(frozen=True)
class ClassOverview:
    total_students: int
    average_rate: int
    band_distribution: list[BandSlice]
    top_performers: list[StudentPerformance]
    needs_attention: list[StudentPerformance]


@dataclass(frozen=True)
class ClassPerformance:
    class_instance_id: str
    label: str
    counts: StatusCounts
    rate: int
    band: PerformanceBand


@dataclass(frozen=True)
class ClassComparison:
    ranking: list[ClassPerformance]
    average_rate: int
    best: Optional[ClassPerformance]
    worst: Optional[ClassPerformance]
