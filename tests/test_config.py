"""
test_config.py — REGIONWATCH_* environment parsing.
"""

import logging
import os

import pytest

from regionwatch.config import Settings, load_settings
from regionwatch.log import setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("REGIONWATCH_"):
            monkeypatch.delenv(name)


def test_defaults():
    assert load_settings() == Settings()


def test_overrides(monkeypatch):
    monkeypatch.setenv("REGIONWATCH_TIMEZONE", "Europe/London")
    monkeypatch.setenv("REGIONWATCH_MAX_POLYGON_POINTS", "8")
    monkeypatch.setenv("REGIONWATCH_CLOSURE_THRESHOLD", "0.005")
    monkeypatch.setenv("REGIONWATCH_LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.timezone == "Europe/London"
    assert settings.max_polygon_points == 8
    assert settings.closure_threshold == 0.005
    assert settings.log_level == "DEBUG"


def test_blank_value_uses_default(monkeypatch):
    monkeypatch.setenv("REGIONWATCH_REQUEST_TIMEOUT", "  ")
    assert load_settings().request_timeout == 10.0


def test_bad_number_names_variable(monkeypatch):
    monkeypatch.setenv("REGIONWATCH_MAX_POLYGON_POINTS", "twelve")
    with pytest.raises(ValueError, match="REGIONWATCH_MAX_POLYGON_POINTS"):
        load_settings()


def test_too_few_max_points(monkeypatch):
    monkeypatch.setenv("REGIONWATCH_MAX_POLYGON_POINTS", "2")
    with pytest.raises(ValueError):
        load_settings()


def test_setup_logging_replaces_handlers():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("DEBUG")
        setup_logging("WARNING")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
