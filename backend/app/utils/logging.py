# backend/app/utils/logging.py
"""
Logging configuration for the Portfolio Analytics service.

Centralized logging setup:
- Level and format driven by settings (LOG_LEVEL, LOG_FORMAT)
- Every record carries the request's correlation ID
- JSON output for production log aggregation
- Third-party HTTP/server loggers kept at WARNING

Usage:
    from app.utils import setup_logging

    # In main.py, before creating the FastAPI app
    setup_logging()

Log Levels:
    DEBUG   - Strategy choices, filtered outliers, series sizes
    INFO    - Request-level events (portfolio analyzed, service started)
    WARNING - Recoverable issues (rate limits, fallback FX rate used)
    ERROR   - Unexpected exceptions
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from app.config import settings
from app.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

# timestamp | level | correlation_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

# Third-party loggers kept at WARNING
NOISY_LOGGERS = [
    "uvicorn.access",
    "httpx",
    "httpcore",
    "asyncio",
    "slowapi",
]

# LogRecord attributes that are not user-supplied extras
_STANDARD_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
})

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# =============================================================================
# FILTERS AND FORMATTERS
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation ID to every record as `correlation_id`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per log line.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.123+00:00",
        "level": "INFO",
        "logger": "app.services.analytics.service",
        "correlation_id": "abc-123-def",
        "message": "Analyzed portfolio of 3 accounts ...",
        "extra": { ... }
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS:
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)

        if extra:
            entry["extra"] = extra

        return json.dumps(entry)


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure the root logger once at application startup.

    Args:
        level: Log level name. Defaults to settings.log_level.
        log_format: 'text' or 'json'. Defaults to settings.log_format.
        suppress_noisy_loggers: Keep third-party loggers at WARNING

    Raises:
        ValueError: If the level name is unknown
    """
    level_name = (level or settings.log_level).upper().strip()
    if level_name not in _LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_name}'. "
            f"Valid levels are: {', '.join(_LEVELS)}"
        )

    format_type = (log_format or settings.log_format or "text").lower()

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=DEFAULT_TEXT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(_LEVELS[level_name])
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy_loggers:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name}, format={format_type}",
        extra={"config": {"level": level_name, "format": format_type}},
    )
