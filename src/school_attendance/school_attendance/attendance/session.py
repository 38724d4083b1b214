"""Editable attendance sheet for one class on one day.

A session loads the roster and any stored marks, lets an operator toggle or
bulk-set statuses, and commits the whole sheet through a single
``replace_day`` call. Repository calls run in worker threads so the caller's
event loop is never blocked; ``is_loading`` and ``is_saving`` expose the
in-flight state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional, Sequence

from ..core.constants import DISPLAY_DATE_FORMAT, SAVED_INDICATOR_SECONDS
from ..core.enums import AlertLevel, AttendanceStatus, Confirmation, MarkState, SaveStatus, SubmitOutcome
from ..core.exceptions import (
    CommitFailure,
    DomainError,
    IncompleteAttendanceError,
    LoadFailure,
    RepositoryError,
    ValidationError,
)
from ..students.model import ClassInstance, Student
from ..students.repository import RosterProvider
from .model import AttendanceRecord, Marker
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


_TOGGLE_CYCLE: dict[MarkState, MarkState] = {
    MarkState.UNMARKED: MarkState.PRESENT,
    MarkState.PRESENT: MarkState.ABSENT,
    MarkState.ABSENT: MarkState.UNMARKED,
    # late only comes from stored data; a click clears it like any other mark
    MarkState.LATE: MarkState.UNMARKED,
}

_BULK_STATES = (MarkState.PRESENT, MarkState.ABSENT)


def next_mark_state(state: MarkState) -> MarkState:
    """Toggle transition: unmarked -> present -> absent -> unmarked."""
    return _TOGGLE_CYCLE[state]


@dataclass(frozen=True)
class Alert:
    level: AlertLevel
    message: str


@dataclass(frozen=True)
class Progress:
    marked: int
    unmarked: int
    total: int
    percentage: int


@dataclass(frozen=True)
class SubmitSummary:
    """Counts shown to the operator before a commit."""

    present: int
    absent: int
    late: int
    total: int


class MarkingSession:
    def __init__(
        self,
        roster: RosterProvider,
        attendance: AttendanceRepository,
        marker: Marker,
        *,
        saved_indicator_seconds: float = SAVED_INDICATOR_SECONDS,
    ):
        self._roster = roster
        self._attendance = attendance
        self._marker = marker
        self._saved_indicator_seconds = float(saved_indicator_seconds)

        self.class_id: Optional[str] = None
        self.on_date: Optional[date] = None
        self.class_instance: Optional[ClassInstance] = None
        self.students: list[Student] = []
        self._states: dict[str, MarkState] = {}

        self.has_existing_attendance = False
        self.is_loading = False
        self.is_saving = False
        self.save_status: Optional[SaveStatus] = None
        self.alert: Optional[Alert] = None
        self.pending_confirmation: Optional[Confirmation] = None
        self.last_error: Optional[DomainError] = None

        self._load_seq = 0
        self._clear_handle: Optional[asyncio.TimerHandle] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    async def load(self, class_id: str, on_date: date) -> bool:
        """Load (class, date), discarding any unsaved edits.

        Returns False when loading failed or was superseded by a newer load.
        Failures never raise; they are kept in ``last_error`` and ``alert``.
        """

        self._load_seq += 1
        token = self._load_seq

        self._discard_working_state()
        self.class_id = class_id
        self.on_date = on_date
        self.is_loading = True

        try:
            return await self._load(token, class_id, on_date)
        finally:
            if token == self._load_seq:
                self.is_loading = False

    async def _load(self, token: int, class_id: str, on_date: date) -> bool:
        try:
            students, class_instance = await asyncio.to_thread(self._fetch_roster, class_id)
        except Exception as e:
            if token == self._load_seq:
                self._report_load_failure(e, "Failed to load students. Please try again.")
            return False
        if token != self._load_seq:
            return False

        self.students = list(students)
        self.class_instance = class_instance
        self._states = {s.student_id: MarkState.UNMARKED for s in self.students}

        try:
            records = await asyncio.to_thread(self._attendance.list_by_class_and_date, class_id, on_date)
        except Exception as e:
            if token == self._load_seq:
                self._report_load_failure(e, "Failed to load existing attendance for this date.")
            return False
        if token != self._load_seq:
            return False

        self._seed(records)
        logger.debug(
            "Loaded class %s on %s: %d students, existing=%s",
            class_id,
            on_date.isoformat(),
            len(self.students),
            self.has_existing_attendance,
        )
        return True

    async def change_date(self, on_date: date) -> bool:
        if self.class_id is None:
            raise ValidationError("Select a class first.")
        return await self.load(self.class_id, on_date)

    async def change_class(self, class_id: str) -> bool:
        if self.on_date is None:
            raise ValidationError("Select a date first.")
        return await self.load(class_id, self.on_date)

    def _fetch_roster(self, class_id: str) -> tuple[Sequence[Student], Optional[ClassInstance]]:
        return self._roster.list_students(class_id), self._roster.get_class(class_id)

    def _seed(self, records: Sequence[AttendanceRecord]) -> None:
        existing = False
        for r in records:
            existing = True
            # Records for students no longer on the roster are not editable here.
            if r.student_id in self._states:
                self._states[r.student_id] = MarkState.from_status(r.status)

        self.has_existing_attendance = existing
        if existing:
            self.alert = Alert(
                AlertLevel.INFO,
                "Attendance already marked for this date. You can modify and resubmit.",
            )

    def _report_load_failure(self, cause: Exception, message: str) -> None:
        failure = LoadFailure(message)
        failure.__cause__ = cause
        self.last_error = failure
        self.alert = Alert(AlertLevel.ERROR, message)
        self._states = {s.student_id: MarkState.UNMARKED for s in self.students}
        self.has_existing_attendance = False
        self.is_loading = False
        if isinstance(cause, RepositoryError):
            logger.warning("Load failed for class %s on %s: %s", self.class_id, self.on_date, cause)
        else:
            logger.error("Unexpected error loading class %s on %s", self.class_id, self.on_date, exc_info=cause)

    def _discard_working_state(self) -> None:
        self._cancel_indicator_clear()
        self.class_instance = None
        self.students = []
        self._states = {}
        self.has_existing_attendance = False
        self.save_status = None
        self.alert = None
        self.pending_confirmation = None
        self.last_error = None

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    @property
    def states(self) -> Mapping[str, MarkState]:
        return dict(self._states)

    def state_of(self, student_id: str) -> MarkState:
        self._require_student(student_id)
        return self._states[student_id]

    def toggle(self, student_id: str) -> MarkState:
        self._require_student(student_id)
        new_state = next_mark_state(self._states[student_id])
        self._states[student_id] = new_state
        return new_state

    def set_state(self, student_id: str, state: MarkState) -> None:
        self._require_student(student_id)
        self._states[student_id] = MarkState(state)

    def mark_all(self, status: AttendanceStatus | MarkState) -> None:
        state = MarkState(status)
        if state not in _BULK_STATES:
            raise ValidationError("Bulk marking supports present or absent only")
        self._states = {s.student_id: state for s in self.students}

    def reset(self) -> None:
        self._cancel_indicator_clear()
        self._states = {s.student_id: MarkState.UNMARKED for s in self.students}
        self.alert = None
        self.save_status = None
        self.pending_confirmation = None

    def _require_student(self, student_id: str) -> None:
        if student_id not in self._states:
            raise ValidationError(f"Student {student_id} is not enrolled in this class")

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------
    @property
    def unmarked_count(self) -> int:
        return sum(1 for s in self._states.values() if s is MarkState.UNMARKED)

    @property
    def progress(self) -> Progress:
        total = len(self.students)
        unmarked = self.unmarked_count
        marked = total - unmarked
        percentage = round(marked * 100 / total) if total else 0
        return Progress(marked=marked, unmarked=unmarked, total=total, percentage=percentage)

    @property
    def can_submit(self) -> bool:
        return (
            self.class_id is not None
            and self.on_date is not None
            and not self.is_loading
            and not self.is_saving
            and self.unmarked_count == 0
        )

    def summary(self) -> SubmitSummary:
        values = list(self._states.values())
        return SubmitSummary(
            present=values.count(MarkState.PRESENT),
            absent=values.count(MarkState.ABSENT),
            late=values.count(MarkState.LATE),
            total=len(values),
        )

    # ------------------------------------------------------------------
    # Submit / confirm / commit
    # ------------------------------------------------------------------
    def request_submit(self) -> SubmitSummary:
        """Validate the sheet and wait for the operator's confirmation."""

        if self.class_id is None or self.on_date is None:
            raise ValidationError("Select a class and date before saving.")

        unmarked = self.unmarked_count
        if unmarked > 0:
            error = IncompleteAttendanceError(unmarked)
            self.alert = Alert(AlertLevel.WARNING, str(error))
            self.pending_confirmation = None
            raise error

        self.pending_confirmation = Confirmation.SUBMIT
        return self.summary()

    def cancel_confirmation(self) -> None:
        self.pending_confirmation = None

    async def confirm(self) -> SubmitOutcome:
        """Accept the pending confirmation.

        Overwriting an existing sheet needs a second, separate confirmation.
        """

        if self.pending_confirmation is None:
            raise ValidationError("Nothing to confirm; submit the sheet first.")

        if self.pending_confirmation is Confirmation.SUBMIT and self.has_existing_attendance:
            self.pending_confirmation = Confirmation.RESUBMIT
            return SubmitOutcome.RESUBMIT_REQUIRED

        return await self._commit()

    def build_records(self) -> list[AttendanceRecord]:
        return [
            AttendanceRecord(
                student_id=s.student_id,
                class_instance_id=self.class_id,
                date=self.on_date,
                status=self._states[s.student_id].to_status(),
                marked_by=self._marker.user_id,
                marked_by_role=self._marker.role_code,
                school_code=self._marker.school_code,
            )
            for s in self.students
        ]

    async def _commit(self) -> SubmitOutcome:
        unmarked = self.unmarked_count
        if unmarked > 0:
            self.pending_confirmation = None
            raise IncompleteAttendanceError(unmarked)
        if self.is_saving:
            raise ValidationError("A save is already in progress.")

        token = self._load_seq
        class_id, on_date = self.class_id, self.on_date
        records = self.build_records()

        self._cancel_indicator_clear()
        self.is_saving = True
        self.save_status = SaveStatus.SAVING
        self.alert = None
        self.pending_confirmation = None

        try:
            await asyncio.to_thread(self._attendance.replace_day, class_id, on_date, records)
        except DomainError as e:
            failure = CommitFailure(str(e) or "Failed to save attendance.")
            failure.__cause__ = e
            # A failure for a sheet the operator already left is only logged.
            if token == self._load_seq:
                self.last_error = failure
                self.save_status = SaveStatus.ERROR
                self.alert = Alert(AlertLevel.ERROR, str(failure))
            logger.warning("Commit failed for class %s on %s: %s", class_id, on_date.isoformat(), e)
            return SubmitOutcome.FAILED
        finally:
            self.is_saving = False

        logger.info("Saved %d attendance records for class %s on %s", len(records), class_id, on_date.isoformat())
        if token != self._load_seq:
            # The operator moved to another sheet while this one was saving.
            return SubmitOutcome.SAVED

        self.has_existing_attendance = True
        self.last_error = None
        self.save_status = SaveStatus.SAVED
        self.alert = Alert(
            AlertLevel.SUCCESS,
            f"Attendance saved for {self._class_label()} ({on_date.strftime(DISPLAY_DATE_FORMAT)})",
        )
        self._schedule_indicator_clear()
        return SubmitOutcome.SAVED

    def _class_label(self) -> str:
        return self.class_instance.label if self.class_instance else "Selected Class"

    def _schedule_indicator_clear(self) -> None:
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(self._saved_indicator_seconds, self._clear_saved_indicator)

    def _clear_saved_indicator(self) -> None:
        self._clear_handle = None
        if self.save_status is SaveStatus.SAVED:
            self.save_status = None

    def _cancel_indicator_clear(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None
