"""Logging setup: Rich console output on stderr, optional plain-text log file."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console

# stdout carries plan/cost output, so all diagnostics go to stderr
stderr_console = Console(stderr=True)

PACKAGE_LOGGER = "meal_scheduler"
FILE_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging(level: str = "info", log_file: Path | None = None) -> logging.Logger:
    """Configure the package logger and return it.

    The console shows records at `level` and above. A log file, when given,
    always records at DEBUG so phase fallbacks and skipped ingredients can be
    traced after the fact.
    """
    from rich.logging import RichHandler

    console_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    console_handler = RichHandler(
        console=stderr_console,
        level=console_level,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(console_handler)

    if log_file is None:
        logger.setLevel(console_level)
        return logger

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG)
    return logger
