from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles allowed to mark attendance."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Statuses persisted in the attendance table."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"

    @property
    def is_attended(self) -> bool:
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class MarkState(str, Enum):
    """Per-student state inside a marking session. UNMARKED is never persisted."""

    UNMARKED = "unmarked"
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"

    @classmethod
    def from_status(cls, status: AttendanceStatus) -> "MarkState":
        return cls(status.value)

    def to_status(self) -> AttendanceStatus:
        if self is MarkState.UNMARKED:
            raise ValueError("unmarked has no persisted status")
        return AttendanceStatus(self.value)


class CalendarStatus(str, Enum):
    """Display status of one calendar day. NO_DATA is synthesized, never stored."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    NO_DATA = "no-data"


class SaveStatus(str, Enum):
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class AlertLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Confirmation(str, Enum):
    """Confirmation step a session is waiting on before committing."""

    SUBMIT = "submit"
    RESUBMIT = "resubmit"


class SubmitOutcome(str, Enum):
    RESUBMIT_REQUIRED = "resubmit_required"
    SAVED = "saved"
    FAILED = "failed"


class RollupPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class PerformanceBand(str, Enum):
    """Classification of an overall attendance rate."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def alert_label(self) -> str:
        # Class dashboards call the two lower bands warning/critical.
        return {
            PerformanceBand.FAIR: "warning",
            PerformanceBand.POOR: "critical",
        }.get(self, self.value)
