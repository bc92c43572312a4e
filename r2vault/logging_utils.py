"""
r2vault Logging Utilities.

Configures the ``r2vault`` logger hierarchy once per process with either:
- Colored console output (interactive runs, cron mail)
- JSON lines (log aggregation on the hosting platform)

Usage:
    from r2vault.logging_utils import setup_logging

    setup_logging(level="INFO", fmt="json")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO, Union

ROOT_LOGGER_NAME = "r2vault"

# ANSI color codes for console output
COLORS = {
    "DEBUG": "\033[36m",     # Cyan
    "INFO": "\033[32m",      # Green
    "WARNING": "\033[33m",   # Yellow
    "ERROR": "\033[31m",     # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def __init__(self, system_name: Optional[str] = None):
        super().__init__()
        self.system_name = system_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.system_name:
            log_entry["system"] = self.system_name

        if hasattr(record, "extra_data"):
            log_entry.update(record.extra_data)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Level-colored console formatter."""

    FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def __init__(self, use_color: bool = True):
        super().__init__(self.FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        color = COLORS.get(record.levelname, COLORS["RESET"])
        original_levelname = record.levelname
        record.levelname = f"{color}{record.levelname}{COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def setup_logging(
    level: Union[int, str] = logging.INFO,
    fmt: str = "console",
    system_name: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the package logger. Calling it again replaces the handler.

    Args:
        level: Logging level name or number
        fmt: "console" or "json"
        system_name: Added to every JSON record when given
        stream: Output stream (default: stdout)

    Returns:
        The configured ``r2vault`` logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    stream = stream or sys.stdout
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    if fmt == "json":
        handler.setFormatter(JSONFormatter(system_name))
    else:
        handler.setFormatter(ColoredFormatter(use_color=stream.isatty()))
    logger.addHandler(handler)

    return logger


def log_event(logger: logging.Logger, level: int, message: str, **extra_data) -> None:
    """Log a message with structured fields for the JSON formatter."""
    logger.log(level, message, extra={"extra_data": extra_data})
