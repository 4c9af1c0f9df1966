"""Structured logging configuration for Jadugar Calc.

Level and log file default to ``config.LOG_LEVEL`` / ``config.LOG_FILE``
(``JADUGAR_LOG_LEVEL`` / ``JADUGAR_LOG_FILE``); the CLI flags override them.
Records logged with ``extra={"error_code": ..., "subject": ...}`` get those
fields appended, so engine failures can be grepped by kind.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

from . import config

ROOT_LOGGER = "jadugar_calc"
CONTEXT_FIELDS = ("error_code", "subject")


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs ``timestamp [LEVEL] logger: message key=value...``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        line = f"{timestamp} [{record.levelname}] {record.name}: {record.getMessage()}"
        context = [
            f"{field}={getattr(record, field)}"
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        ]
        if context:
            line += " " + " ".join(context)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: Optional[str] = None, log_file: Optional[str] = None
) -> logging.Logger:
    """Set up structured logging for the application.

    Args:
        level: Logging level name; defaults to ``config.LOG_LEVEL``
        log_file: Optional file path for a second handler; defaults to
            ``config.LOG_FILE``. Logs always go to stderr as well.

    Returns:
        The configured ``jadugar_calc`` logger
    """
    level = (level or config.LOG_LEVEL).upper()
    log_file = log_file or config.LOG_FILE

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level, logging.WARNING))

    # Calling twice must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(StructuredFormatter())
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for one engine module, e.g. ``get_logger("solver")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
