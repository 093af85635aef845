"""Structured JSON logging for eventspool."""

import json
import logging
from datetime import UTC, datetime
from typing import Any

# Dynamically derive standard LogRecord attributes at module import time
# This ensures future Python additions (like taskName) are automatically handled
_STANDARD_LOGRECORD_KEYS: frozenset[str] = frozenset(
    logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
    ).__dict__.keys()
)


class JSONFormatter(logging.Formatter):
    """JSON formatter with UTC ISO8601 timestamps."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Standard eventspool fields first so they keep a stable position
        for field in ("entry_id", "operation", "event_name", "backend_kind"):
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        for key, value in vars(record).items():
            if key not in _STANDARD_LOGRECORD_KEYS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)

        try:
            return json.dumps(log_data, default=str)
        except Exception:
            return str(log_data)


# Package loggers that carry the JSON handler
LOGGER_NAMES = ("eventspool.queue", "eventspool.bus", "eventspool.redis")

_configured: set[str] = set()


def _setup_json_handler(logger: logging.Logger, level: int) -> None:
    """Attach a JSON stream handler and set the level, once per logger.

    Later calls leave the logger alone so a level chosen with set_log_level
    is not reset every time a queue is built.
    """
    if logger.name in _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    _configured.add(logger.name)


def configure_queue_logger(level: int = logging.INFO) -> logging.Logger:
    """Configure and return the default queue logger with JSON formatting.

    Args:
        level: The logging level used the first time the logger is configured.
    """
    logger = logging.getLogger("eventspool.queue")
    _setup_json_handler(logger, level)
    return logger


def get_logger(name: str = "eventspool", level: int = logging.INFO) -> logging.Logger:
    """Get a logger with JSON formatting.

    Args:
        name: The logger name. Defaults to "eventspool".
        level: The logging level used the first time the logger is configured.
    """
    logger = logging.getLogger(name)
    _setup_json_handler(logger, level)
    return logger


def set_log_level(level: int) -> None:
    """Set the level of every eventspool logger, configuring any not yet set up."""
    for name in LOGGER_NAMES:
        get_logger(name, level).setLevel(level)
