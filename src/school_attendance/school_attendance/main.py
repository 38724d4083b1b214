from __future__ import annotations

import logging
from pathlib import Path
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module, load_settings

from .analytics.controller import register as register_analytics
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_WEEK_START, SAVED_INDICATOR_SECONDS
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def read_week_start(settings: ModuleType) -> int:
    """WEEK_START as an int in 0..6; rejected at startup rather than on every rollup."""
    raw = getattr(settings, "WEEK_START", DEFAULT_WEEK_START)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"WEEK_START must be an integer from 0 (Monday) to 6 (Sunday), got {raw!r}") from None
    if not 0 <= value <= 6:
        raise ValueError(f"WEEK_START must be an integer from 0 (Monday) to 6 (Sunday), got {raw!r}")
    return value


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run over pre-built repositories (tests, demos);
    otherwise MySQL repositories are wired from the active settings module.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    week_start = read_week_start(settings)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            saved_indicator_seconds=float(getattr(settings, "SAVED_INDICATOR_SECONDS", SAVED_INDICATOR_SECONDS)),
            week_start=week_start,
        )

    register_error_handlers(app)
    register_attendance(app, container)
    register_analytics(app, container)

    return app
