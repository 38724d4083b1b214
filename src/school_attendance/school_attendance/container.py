from __future__ import annotations

from dataclasses import dataclass

from .analytics.service import AnalyticsService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_WEEK_START, SAVED_INDICATOR_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .students.mysql_roster_repository import MySQLRosterRepository
from .students.repository import RosterProvider


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    roster_repo: RosterProvider

    attendance_service: AttendanceService
    analytics_service: AnalyticsService


def build_services(
    attendance_repo: AttendanceRepository,
    roster_repo: RosterProvider,
    *,
    saved_indicator_seconds: float = SAVED_INDICATOR_SECONDS,
    week_start: int = DEFAULT_WEEK_START,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    return Container(
        attendance_repo=attendance_repo,
        roster_repo=roster_repo,
        attendance_service=AttendanceService(
            attendance_repo,
            roster_repo,
            saved_indicator_seconds=saved_indicator_seconds,
        ),
        analytics_service=AnalyticsService(attendance_repo, roster_repo, first_weekday=week_start),
    )


def build_container(
    *,
    db_config: dict,
    saved_indicator_seconds: float = SAVED_INDICATOR_SECONDS,
    week_start: int = DEFAULT_WEEK_START,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        MySQLAttendanceRepository(conn),
        MySQLRosterRepository(conn),
        saved_indicator_seconds=saved_indicator_seconds,
        week_start=week_start,
    )
