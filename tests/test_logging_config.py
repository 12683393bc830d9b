"""Tests for CLI logging setup."""

import logging

import pytest
import structlog

from multiarch_manifests.logging_config import configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    structlog.reset_defaults()


def test_explicit_level():
    configure_logging("debug")

    assert logging.getLogger().level == logging.DEBUG
    assert structlog.is_configured()


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    configure_logging()

    assert logging.getLogger().level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    configure_logging("chatty")

    assert logging.getLogger().level == logging.INFO
