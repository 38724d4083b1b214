from __future__ import annotations

import logging
from datetime import date, timedelta
from functools import wraps
from typing import Mapping

from flask import Flask, jsonify, session

from ..attendance.model import Marker
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import Role
from ..core.exceptions import (
    CommitFailure,
    DomainError,
    IncompleteAttendanceError,
    LoadFailure,
    NotFoundError,
    RepositoryError,
    ValidationError,
)
from .datetime_utils import today_local
from .validators import require_date_range, require_iso_date

logger = logging.getLogger(__name__)

MARKING_ROLES = {Role.ADMIN.value, Role.SUPERADMIN.value}


def failure(message: str, status: int, **extra):
    return jsonify({"success": False, "message": message, **extra}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(IncompleteAttendanceError)
    def _incomplete(e: IncompleteAttendanceError):
        return failure(str(e), 400, unmarked=e.unmarked)

    @app.errorhandler(ValidationError)
    def _invalid(e: ValidationError):
        return failure(str(e), 400)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return failure(str(e), 404)

    @app.errorhandler(LoadFailure)
    @app.errorhandler(CommitFailure)
    @app.errorhandler(RepositoryError)
    def _unavailable(e: DomainError):
        logger.error("Store failure while handling request: %s", e)
        return failure(str(e) or "Attendance store is unavailable", 503)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return failure("Please sign in to continue.", 401)
        return view(*args, **kwargs)

    return wrapper


def marker_required(view):
    """Async views that write attendance; only admins may mark."""

    @wraps(view)
    async def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return failure("Please sign in to continue.", 401)
        if session.get("role") not in MARKING_ROLES:
            return failure("You are not allowed to mark attendance.", 403)
        return await view(*args, **kwargs)

    return wrapper


def current_marker() -> Marker:
    return Marker(
        user_id=str(session["user_id"]),
        role_code=session.get("role_code") or session.get("role"),
        school_code=session.get("school_code"),
    )


def parse_range(args: Mapping[str, str], *, default_days: int = DEFAULT_REPORT_DAYS) -> tuple[date, date]:
    """``start``/``end`` query args, defaulting to the last ``default_days`` days."""
    today = today_local()
    end = require_iso_date(args.get("end"), "end") if args.get("end") else today
    start = require_iso_date(args.get("start"), "start") if args.get("start") else end - timedelta(days=default_days)
    return require_date_range(start, end)
