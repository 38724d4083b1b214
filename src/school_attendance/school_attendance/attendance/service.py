from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional

from ..core.constants import SAVED_INDICATOR_SECONDS
from ..core.enums import MarkState, SubmitOutcome
from ..core.exceptions import CommitFailure, LoadFailure, ValidationError
from ..students.repository import RosterProvider
from .model import Marker
from .repository import AttendanceRepository
from .session import MarkingSession, SubmitSummary


@dataclass(frozen=True)
class SubmitResult:
    outcome: SubmitOutcome
    summary: SubmitSummary


class AttendanceService:
    """Entry point for marking attendance outside an interactive UI.

    Each call drives a fresh MarkingSession, so the same confirmation rules
    apply to API clients and to interactive sheets.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterProvider,
        *,
        saved_indicator_seconds: float = SAVED_INDICATOR_SECONDS,
    ):
        self._attendance = attendance
        self._roster = roster
        self._saved_indicator_seconds = float(saved_indicator_seconds)

    def open_session(self, marker: Marker) -> MarkingSession:
        return MarkingSession(
            self._roster,
            self._attendance,
            marker,
            saved_indicator_seconds=self._saved_indicator_seconds,
        )

    async def load_sheet(self, class_id: str, on_date: date, *, marker: Optional[Marker] = None) -> MarkingSession:
        session = self.open_session(marker or Marker(user_id=None))
        if not await session.load(class_id, on_date):
            raise session.last_error or LoadFailure("Failed to load attendance.")
        return session

    async def submit_sheet(
        self,
        class_id: str,
        on_date: date,
        statuses: Mapping[str, str],
        *,
        marker: Marker,
        confirm_resubmit: bool = False,
    ) -> SubmitResult:
        """Replace the sheet for (class, date) with ``statuses``.

        Returns RESUBMIT_REQUIRED without writing when the day already has
        attendance and ``confirm_resubmit`` is not set. Raises
        IncompleteAttendanceError when a student is left unmarked and
        CommitFailure when the store rejects the write.
        """

        session = await self.load_sheet(class_id, on_date, marker=marker)

        unknown = set(statuses) - set(session.states)
        if unknown:
            raise ValidationError(f"Students not enrolled in this class: {', '.join(sorted(unknown))}")

        for student_id, value in statuses.items():
            try:
                state = MarkState(value)
            except ValueError:
                raise ValidationError(f"Unknown attendance status {value!r} for student {student_id}") from None
            session.set_state(student_id, state)

        summary = session.request_submit()
        outcome = await session.confirm()
        if outcome is SubmitOutcome.RESUBMIT_REQUIRED and confirm_resubmit:
            outcome = await session.confirm()
        if outcome is SubmitOutcome.FAILED:
            raise session.last_error or CommitFailure("Failed to save attendance.")
        return SubmitResult(outcome=outcome, summary=summary)
