"""Logging helpers for mortgage_engine.

The package logs through the standard ``logging`` module under the
``mortgage_engine`` logger. Nothing is printed until an application calls
:func:`configure_logging`; the level, log file and JSON formatting can also
be driven by environment variables.
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

PACKAGE_LOGGER = "mortgage_engine"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ENV_LOG_LEVEL = "MORTGAGE_ENGINE_LOG_LEVEL"
ENV_LOG_FILE = "MORTGAGE_ENGINE_LOG_FILE"
ENV_LOG_FORMAT = "MORTGAGE_ENGINE_LOG_FORMAT"
ENV_STRUCTURED_LOGS = "MORTGAGE_ENGINE_STRUCTURED_LOGS"

# LogRecord attributes that are not user-supplied ``extra`` fields
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def _resolve_level(level: str | None) -> int:
    level_str = level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    return getattr(logging, level_str.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the package hierarchy.

    Args:
        name: Name of the logger (typically ``__name__`` of the calling module)

    Returns:
        Logger whose records propagate to the ``mortgage_engine`` logger

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Schedule built", extra={"total_periods": 240})
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: str | None = None,
    log_file: str | None = None,
    console: bool = True,
    structured: bool = False,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure handlers for the whole package.

    Meant to be called once by the application embedding the engine.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to
               MORTGAGE_ENGINE_LOG_LEVEL or INFO.
        log_file: Path of a rotating log file. Defaults to
                  MORTGAGE_ENGINE_LOG_FILE; no file logging when unset.
        console: Whether to log to stdout
        structured: Emit JSON lines instead of plain text. Also enabled by
                    MORTGAGE_ENGINE_STRUCTURED_LOGS=true.
        max_bytes: Size at which the log file is rotated
        backup_count: Number of rotated files to keep

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    use_structured = structured or os.getenv(ENV_STRUCTURED_LOGS, "").lower() in (
        "true",
        "1",
        "yes",
    )

    if use_structured:
        formatter: logging.Formatter = StructuredFormatter(datefmt=DEFAULT_DATE_FORMAT)
    else:
        log_format = os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT)
        formatter = logging.Formatter(log_format, datefmt=DEFAULT_DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    log_file_path = log_file or os.getenv(ENV_LOG_FILE)
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def disable_logging() -> None:
    """Silence all package logging (useful in tests)."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
