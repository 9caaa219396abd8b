"""Logging configuration for shelfscan.

All modules log through ``logging.getLogger(__name__)``; the handlers live on
the package logger so library users who never call :func:`setup_logging`
keep full control of their own logging tree.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "shelfscan"

FILE_FORMAT = "%(asctime)s | %(levelname)-5s | [%(name)s] %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_console_handler: logging.Handler | None = None


def _build_console_handler(rich_console: bool, level: int) -> logging.Handler:
    handler: logging.Handler
    if rich_console:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            # Filenames routinely contain [brackets]; never treat them as markup
            markup=False,
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler.setLevel(level)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | str | None = None,
    rich_console: bool = True,
    quiet_console: bool = False,
) -> logging.Logger:
    """
    Configure the ``shelfscan`` logger.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR), any case
        log_file: Optional file path; receives DEBUG and above
        rich_console: Use RichHandler instead of a plain stream handler
        quiet_console: Only show WARNING+ on the console

    Returns:
        The package logger
    """
    global _console_handler
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = _build_console_handler(
        rich_console, logging.WARNING if quiet_console else level
    )
    logger.addHandler(console_handler)
    _console_handler = console_handler

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(file_handler)

    return logger


def set_console_quiet(quiet: bool = True) -> None:
    """Toggle the console handler between WARNING+ and INFO+.

    File logging is unaffected.
    """
    if _console_handler is not None:
        _console_handler.setLevel(logging.WARNING if quiet else logging.INFO)
