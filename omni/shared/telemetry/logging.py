"""Logging configuration for the application.

Stores and services accept an injected logging.Logger; this module only
decides level and sink for the process.
"""

import logging
import sys
from typing import TextIO

from omni.core.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    settings: Settings | None = None,
    *,
    level: int | str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure application-wide logging.

    Level resolution: explicit level, then settings.log_level, then DEBUG
    when settings.debug is True, otherwise INFO. Output goes to stream
    (stdout by default).
    """
    if level is None:
        settings = settings or get_settings()
        if settings.log_level:
            level = settings.log_level.upper()
        else:
            level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(stream or sys.stdout)],
        force=True,
    )

