"""Example: drive the service layer directly (no Flask).

Marks the seeded class c-5a present for today, then prints its analytics.
Run ``python scripts/seed_db.py`` first.
"""

import asyncio
from datetime import timedelta

from config import load_settings

from src.school_attendance.school_attendance.attendance.model import Marker
from src.school_attendance.school_attendance.common.datetime_utils import today_local
from src.school_attendance.school_attendance.container import build_container
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, SubmitOutcome


async def mark_everyone_present(container, class_id: str) -> SubmitOutcome:
    session = container.attendance_service.open_session(Marker(user_id="demo", role_code="admin"))
    if not await session.load(class_id, today_local()):
        raise session.last_error

    session.mark_all(AttendanceStatus.PRESENT)
    print(session.request_submit())
    outcome = await session.confirm()
    if outcome is SubmitOutcome.RESUBMIT_REQUIRED:
        outcome = await session.confirm()
    print(session.alert.message if session.alert else outcome.value)
    return outcome


def main():
    settings = load_settings()
    container = build_container(db_config=settings.DB_CONFIG)

    asyncio.run(mark_everyone_present(container, "c-5a"))

    end = today_local()
    data = container.analytics_service.class_summary("c-5a", start=end - timedelta(days=30), end=end)
    print(f"rate={data.summary.rate}% band={data.summary.band.value} students={data.overview.total_students}")
    for p in data.students:
        print(f"  {p.full_name}: {p.rate}% streak={p.current_streak} ({p.band.value})")


if __name__ == "__main__":
    main()
