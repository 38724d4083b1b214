from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_date
from ..common.http import current_marker, failure, marker_required
from ..common.validators import require_iso_date
from ..core.enums import SubmitOutcome
from ..core.exceptions import ValidationError
from ..container import Container
from .session import MarkingSession, SubmitSummary


def _summary_json(summary: SubmitSummary) -> dict:
    return {
        "present": summary.present,
        "absent": summary.absent,
        "late": summary.late,
        "total": summary.total,
    }


def _sheet_json(sheet: MarkingSession) -> dict:
    states = sheet.states
    progress = sheet.progress
    return {
        "class_id": sheet.class_id,
        "class_label": sheet.class_instance.label if sheet.class_instance else None,
        "date": format_iso_date(sheet.on_date),
        "has_existing_attendance": sheet.has_existing_attendance,
        "students": [
            {
                "student_id": s.student_id,
                "full_name": s.full_name,
                "status": states[s.student_id].value,
            }
            for s in sheet.students
        ],
        "progress": {
            "marked": progress.marked,
            "unmarked": progress.unmarked,
            "total": progress.total,
            "percentage": progress.percentage,
        },
        "alert": {"type": sheet.alert.level.value, "message": sheet.alert.message} if sheet.alert else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes/<class_id>/attendance/<day>", methods=["GET"], endpoint="attendance_sheet")
    @marker_required
    async def attendance_sheet(class_id: str, day: str):
        on_date = require_iso_date(day, "date")
        sheet = await container.attendance_service.load_sheet(class_id, on_date, marker=current_marker())
        return jsonify({"success": True, "sheet": _sheet_json(sheet)})

    @app.route("/api/classes/<class_id>/attendance/<day>", methods=["POST"], endpoint="attendance_submit")
    @marker_required
    async def attendance_submit(class_id: str, day: str):
        """Replace the day's sheet.

        Body: {"statuses": {student_id: "present"|"absent"|"late"}, "confirm_resubmit": bool}.
        Resubmitting an existing day answers 409 until confirm_resubmit is true.
        """

        on_date = require_iso_date(day, "date")
        payload = request.get_json(silent=True) or {}
        statuses = payload.get("statuses")
        if not isinstance(statuses, dict):
            raise ValidationError("statuses must be an object of student_id -> status")

        result = await container.attendance_service.submit_sheet(
            class_id,
            on_date,
            {str(k): str(v) for k, v in statuses.items()},
            marker=current_marker(),
            confirm_resubmit=bool(payload.get("confirm_resubmit")),
        )

        if result.outcome is SubmitOutcome.RESUBMIT_REQUIRED:
            return failure(
                "Attendance already exists for this date. Confirm to replace it.",
                409,
                outcome=result.outcome.value,
                summary=_summary_json(result.summary),
            )
        return jsonify(
            {
                "success": True,
                "outcome": result.outcome.value,
                "summary": _summary_json(result.summary),
            }
        )
