"""
Typed Cache - Logging Setup

Structured logging for the typed_cache package. Modules log through
``logging.getLogger(__name__)`` with ``extra={...}`` fields; this module
decides how those records are rendered.

Usage:
    from typed_cache.observability import configure_logging

    configure_logging()                    # level/format from config
    configure_logging("DEBUG", "text")     # explicit
"""

import json
import logging
from datetime import UTC, datetime

PACKAGE_LOGGER = "typed_cache"

_RESERVED_ATTRS = frozenset(
    {
        "args",
        "msg",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    }
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Extra fields passed via logger.<level>(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(level: str | None = None, fmt: str | None = None) -> logging.Logger:
    """
    Install a single stream handler on the package logger.

    Args:
        level: Log level name (defaults to LOG_LEVEL from config)
        fmt: "json" or "text" (defaults to LOG_FORMAT from config)

    Returns:
        The configured package logger
    """
    if level is None or fmt is None:
        from .config import get_config

        config = get_config()
        level = level or str(config.log_level)
        fmt = fmt or str(config.log_format)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level.upper())

    return logger
