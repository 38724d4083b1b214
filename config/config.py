from __future__ import annotations

import importlib
import os
from types import ModuleType


class Config:
    """Defaults shared by every environment; each value can be overridden by env vars."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")

    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_NAME = os.environ.get("DB_NAME", "school_attendance")

    # Seconds the "saved" indicator stays up after a commit.
    SAVED_INDICATOR_SECONDS = float(os.environ.get("SAVED_INDICATOR_SECONDS", "2.5"))
    # First day of a weekly rollup bucket: 0=Monday ... 6=Sunday.
    WEEK_START = int(os.environ.get("WEEK_START", "0"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


def db_config() -> dict:
    return {
        "host": Config.DB_HOST,
        "port": Config.DB_PORT,
        "user": Config.DB_USER,
        "password": Config.DB_PASSWORD,
        "database": Config.DB_NAME,
    }


# APP_ENV value -> settings module; anything else falls back to development.
_SETTINGS_MODULES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
    "dev": "config.development",
    "development": "config.development",
}


def get_settings_module(env: str | None = None) -> str:
    env = (env if env is not None else os.getenv("APP_ENV", "development")).strip().lower()
    return _SETTINGS_MODULES.get(env, "config.development")


def load_settings(env: str | None = None) -> ModuleType:
    return importlib.import_module(get_settings_module(env))
