from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

from ..analytics.model import AttendanceSummary, RollupBucket, StudentPerformance

_ROLLUP_COLUMNS = ["Period", "Present", "Absent", "Late", "Total", "Attendance Rate (%)"]


def _rollup_frame(buckets: Sequence[RollupBucket]) -> pd.DataFrame:
    return pd.DataFrame(
        [[b.key.isoformat(), b.present, b.absent, b.late, b.total, b.rate] for b in buckets],
        columns=_ROLLUP_COLUMNS,
    )


def _students_frame(performances: Sequence[StudentPerformance]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            [
                p.full_name,
                p.student_code or "",
                p.counts.present,
                p.counts.absent,
                p.counts.late,
                p.counts.total,
                p.rate,
                p.current_streak,
                p.band.value,
            ]
            for p in performances
        ],
        columns=["Student", "Code", "Present", "Absent", "Late", "Total", "Attendance Rate (%)", "Streak", "Status"],
    )


def export_rollups_xlsx(
    summary: AttendanceSummary,
    *,
    students: Sequence[StudentPerformance] = (),
) -> bytes:
    """Workbook with Daily/Weekly/Monthly sheets (and Students when given)."""

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        _rollup_frame(summary.daily).to_excel(writer, sheet_name="Daily", index=False)
        _rollup_frame(summary.weekly).to_excel(writer, sheet_name="Weekly", index=False)
        _rollup_frame(summary.monthly).to_excel(writer, sheet_name="Monthly", index=False)
        if students:
            _students_frame(students).to_excel(writer, sheet_name="Students", index=False)
    return out.getvalue()
