from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_date, today_local
from ..common.http import login_required, parse_range
from ..common.validators import require_iso_date
from ..core.enums import RollupPeriod
from ..core.exceptions import ValidationError
from ..container import Container
from ..reports.csv_export import csv_filename, export_records_csv, export_rollup_csv
from ..reports.excel_export import export_rollups_xlsx
from . import engine
from .model import AttendanceSummary, ClassPerformance, RollupBucket, StatusCounts, StudentPerformance


def _counts_json(c: StatusCounts) -> dict:
    return {"present": c.present, "absent": c.absent, "late": c.late, "total": c.total, "rate": c.rate}


def _bucket_json(b: RollupBucket) -> dict:
    return {"key": format_iso_date(b.key), "label": b.label, **_counts_json(b.counts)}


def _summary_json(s: AttendanceSummary) -> dict:
    return {
        "counts": _counts_json(s.counts),
        "rate": s.rate,
        "band": s.band.value,
        "current_streak": s.current_streak,
        "streak_badge": engine.streak_badge(s.current_streak),
        "best_streak": s.best_streak,
        "distribution": [{"name": d.label, "status": d.status.value, "value": d.count} for d in s.distribution],
        "daily": [_bucket_json(b) for b in s.daily],
        "weekly": [_bucket_json(b) for b in s.weekly],
        "monthly": [_bucket_json(b) for b in s.monthly],
        "trend": [{"date": format_iso_date(t.date), "rate": t.rate} for t in s.trend],
    }


def _student_json(p: StudentPerformance) -> dict:
    return {
        "student_id": p.student_id,
        "full_name": p.full_name,
        "student_code": p.student_code,
        **_counts_json(p.counts),
        "current_streak": p.current_streak,
        "status": p.band.value,
    }


def _class_json(c: ClassPerformance) -> dict:
    return {
        "class_id": c.class_instance_id,
        "label": c.label,
        **_counts_json(c.counts),
        "status": c.band.alert_label,
    }


def _rollup_period(value: str | None) -> RollupPeriod:
    try:
        return RollupPeriod(value or RollupPeriod.WEEK.value)
    except ValueError:
        raise ValidationError("period must be one of day, week, month") from None


def register(app: Flask, container: Container) -> None:
    analytics = container.analytics_service

    @app.route("/api/students/<student_id>/analytics", methods=["GET"], endpoint="student_analytics")
    @login_required
    def student_analytics(student_id: str):
        start, end = parse_range(request.args)
        summary = analytics.student_summary(student_id, start=start, end=end)
        return jsonify({"success": True, "start": format_iso_date(start), "end": format_iso_date(end), **_summary_json(summary)})

    @app.route("/api/classes/<class_id>/analytics", methods=["GET"], endpoint="class_analytics")
    @login_required
    def class_analytics(class_id: str):
        start, end = parse_range(request.args)
        data = analytics.class_summary(class_id, start=start, end=end)
        overview = data.overview
        return jsonify(
            {
                "success": True,
                "start": format_iso_date(start),
                "end": format_iso_date(end),
                **_summary_json(data.summary),
                "students": [_student_json(p) for p in data.students],
                "overview": {
                    "total_students": overview.total_students,
                    "average_rate": overview.average_rate,
                    "band_distribution": [{"band": b.band.value, "value": b.count} for b in overview.band_distribution],
                    "top_performers": [_student_json(p) for p in overview.top_performers],
                    "needs_attention": [_student_json(p) for p in overview.needs_attention],
                },
            }
        )

    @app.route("/api/analytics/classes", methods=["GET"], endpoint="class_comparison")
    @login_required
    def class_comparison():
        ids = [i.strip() for i in (request.args.get("ids") or "").split(",") if i.strip()]
        if not ids:
            raise ValidationError("ids is required")
        start, end = parse_range(request.args)
        comparison = analytics.compare_classes(ids, start=start, end=end)
        return jsonify(
            {
                "success": True,
                "ranking": [_class_json(c) for c in comparison.ranking],
                "average_rate": comparison.average_rate,
                "best": _class_json(comparison.best) if comparison.best else None,
                "worst": _class_json(comparison.worst) if comparison.worst else None,
            }
        )

    @app.route("/api/students/<student_id>/calendar", methods=["GET"], endpoint="student_calendar")
    @login_required
    def student_calendar(student_id: str):
        anchor = require_iso_date(request.args.get("date"), "date") if request.args.get("date") else today_local()
        view = analytics.student_calendar(student_id, anchor=anchor, mode=_rollup_period(request.args.get("mode") or "month"))
        totals = view.totals
        return jsonify(
            {
                "success": True,
                "start": format_iso_date(view.start),
                "end": format_iso_date(view.end),
                "days": [{"date": format_iso_date(d.date), "status": d.status.value} for d in view.days],
                "totals": {
                    "total": totals.total,
                    "present": totals.present,
                    "absent": totals.absent,
                    "late": totals.late,
                    "rate": totals.rate,
                    "total_days": totals.total_days,
                    "no_data_days": totals.no_data_days,
                },
            }
        )

    def _csv_response(body: str, filename: str):
        return app.response_class(
            body.encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/students/<student_id>/attendance.csv", methods=["GET"], endpoint="student_attendance_csv")
    @login_required
    def student_attendance_csv(student_id: str):
        anchor = require_iso_date(request.args.get("date"), "date") if request.args.get("date") else today_local()
        mode = _rollup_period(request.args.get("mode") or "month")
        view = analytics.student_calendar(student_id, anchor=anchor, mode=mode)
        records = analytics.student_records(student_id, start=view.start, end=view.end)
        return _csv_response(export_records_csv(records), csv_filename(mode, anchor))

    @app.route("/api/students/<student_id>/rollups.csv", methods=["GET"], endpoint="student_rollups_csv")
    @login_required
    def student_rollups_csv(student_id: str):
        start, end = parse_range(request.args)
        period = _rollup_period(request.args.get("period"))
        summary = analytics.student_summary(student_id, start=start, end=end)
        buckets = {RollupPeriod.DAY: summary.daily, RollupPeriod.WEEK: summary.weekly, RollupPeriod.MONTH: summary.monthly}[period]
        filename = f"attendance_analytics_{period.value}_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _csv_response(export_rollup_csv(buckets, period), filename)

    @app.route("/api/classes/<class_id>/rollups.xlsx", methods=["GET"], endpoint="class_rollups_xlsx")
    @login_required
    def class_rollups_xlsx(class_id: str):
        start, end = parse_range(request.args)
        data = analytics.class_summary(class_id, start=start, end=end)
        return app.response_class(
            export_rollups_xlsx(data.summary, students=data.students),
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename=attendance_{class_id}_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.xlsx"},
        )
