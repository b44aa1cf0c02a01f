"""Tests for process logging setup."""

import io
import logging

from omni.core.config import Settings
from omni.shared.telemetry import setup_logging


def test_explicit_level_and_stream() -> None:
    stream = io.StringIO()
    setup_logging(level="WARNING", stream=stream)
    logging.getLogger("omni.test").warning("cache down")
    logging.getLogger("omni.test").info("hidden")
    output = stream.getvalue()
    assert "omni.test - WARNING - cache down" in output
    assert "hidden" not in output


def test_level_from_settings() -> None:
    setup_logging(Settings(database_url="sqlite+aiosqlite://", debug=True), stream=io.StringIO())
    assert logging.getLogger().level == logging.DEBUG
    setup_logging(
        Settings(database_url="sqlite+aiosqlite://", log_level="error"), stream=io.StringIO()
    )
    assert logging.getLogger().level == logging.ERROR
