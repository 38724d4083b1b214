from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..core.constants import CSV_HEADER
from ..core.enums import AttendanceStatus, CalendarStatus, RollupPeriod
from ..core.exceptions import ValidationError
from ..analytics.model import RollupBucket

_ROLLUP_KEY_COLUMN = {
    RollupPeriod.DAY: "Date",
    RollupPeriod.WEEK: "Week",
    RollupPeriod.MONTH: "Month",
}


@dataclass(frozen=True)
class ImportedMark:
    """A (date, status) pair read back from a CSV export."""

    date: date
    status: AttendanceStatus


def export_records_csv(rows: Iterable) -> str:
    """``Date,Status`` CSV; accepts records or calendar days (anything with date/status)."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in rows:
        writer.writerow([format_iso_date(r.date), r.status.value])
    return out.getvalue()


def import_records_csv(text: str) -> list[ImportedMark]:
    """Parse a ``Date,Status`` CSV.

    ``no-data`` placeholder rows are skipped; any other unknown status raises
    ValidationError naming the line.
    """

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    header = next(reader, None)
    if header is None or tuple(h.strip() for h in header) != CSV_HEADER:
        raise ValidationError("CSV header must be 'Date,Status'")

    marks: list[ImportedMark] = []
    for line_no, row in enumerate(reader, start=2):
        if not row or not any(cell.strip() for cell in row):
            continue
        if len(row) != 2:
            raise ValidationError(f"Line {line_no}: expected 2 columns, got {len(row)}")

        raw_date, raw_status = row[0].strip(), row[1].strip()
        if raw_status == CalendarStatus.NO_DATA.value:
            continue
        try:
            day = parse_iso_date(raw_date)
        except ValueError:
            raise ValidationError(f"Line {line_no}: invalid date {raw_date!r}") from None
        try:
            status = AttendanceStatus(raw_status)
        except ValueError:
            raise ValidationError(f"Line {line_no}: unknown status {raw_status!r}") from None
        marks.append(ImportedMark(date=day, status=status))
    return marks


def export_rollup_csv(buckets: Sequence[RollupBucket], period: RollupPeriod | str) -> str:
    period = RollupPeriod(period)
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow([_ROLLUP_KEY_COLUMN[period], "Present", "Absent", "Late", "Total", "Attendance Rate"])
    for b in buckets:
        writer.writerow([b.label, b.present, b.absent, b.late, b.total, f"{b.rate}%"])
    return out.getvalue()


def csv_filename(mode: RollupPeriod | str, anchor: date) -> str:
    """``attendance_{mode}_{label}.csv`` where label matches the viewed window."""
    mode = RollupPeriod(mode)
    if mode is RollupPeriod.DAY:
        label = format_iso_date(anchor)
    elif mode is RollupPeriod.WEEK:
        iso_year, iso_week, _ = anchor.isocalendar()
        label = f"week_{iso_week}_{iso_year}"
    else:
        label = anchor.strftime("%Y-%m")
    return f"attendance_{mode.value}_{label}.csv"
