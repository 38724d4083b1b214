from types import SimpleNamespace

import pytest

import config.testing as testing_settings
from config import get_settings_module, load_settings
from src.school_attendance.school_attendance.container import build_services
from src.school_attendance.school_attendance.main import create_app, read_week_start


@pytest.mark.parametrize(
    "env,module",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("test", "config.testing"),
        ("development", "config.development"),
        ("staging", "config.development"),
    ],
)
def test_app_env_selects_settings_module(env, module):
    assert get_settings_module(env) == module


def test_load_settings_reads_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    assert load_settings() is testing_settings
    assert testing_settings.SAVED_INDICATOR_SECONDS == 0.0


@pytest.mark.parametrize("value", [-1, 7, "sunday", None])
def test_week_start_out_of_range_is_rejected(value):
    with pytest.raises(ValueError):
        read_week_start(SimpleNamespace(WEEK_START=value))


def test_week_start_accepts_sunday():
    assert read_week_start(SimpleNamespace(WEEK_START="6")) == 6


def test_create_app_refuses_bad_week_start(monkeypatch, roster, store):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setattr(testing_settings, "WEEK_START", 9)

    with pytest.raises(ValueError):
        create_app(container=build_services(store, roster))
