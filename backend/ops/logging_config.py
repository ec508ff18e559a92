# ops/logging_config.py
"""
Structured logging configuration.

Provides JSON-formatted logs suitable for log aggregation systems.

Configuration:
- Development: Human-readable console output
- Production: JSON lines to stdout

Environment variables:
- LOG_FORMAT: "json" or "console" (default: json in production)
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)

Application code logs with ``logging.getLogger(__name__)`` and passes
structured fields through ``extra={...}``; the JSON formatter lifts them
into an ``extra`` object.
"""
import json
import logging
import os
from datetime import datetime, timezone


APP_LOGGERS = ("accounts", "accounting", "payroll", "reporting", "ops")

# Attributes every LogRecord has; anything else came in through ``extra``.
STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "exc_info", "exc_text", "stack_info",
    "message", "taskName",
})


def get_logging_config(debug: bool = False) -> dict:
    """
    Get Django LOGGING configuration.

    Args:
        debug: Whether running in debug mode

    Returns:
        Django LOGGING dict
    """
    log_level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    log_format = os.environ.get("LOG_FORMAT", "console" if debug else "json")

    if log_format == "json":
        formatters = {
            "json": {
                "()": "ops.logging_config.JsonFormatter",
            },
        }
        console = {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        }
    else:
        formatters = {
            "verbose": {
                "format": "[{asctime}] {levelname} {name} {message}",
                "style": "{",
            },
        }
        console = {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        }

    loggers = {
        "": {
            "handlers": ["console"],
            "level": log_level,
        },
        "django": {
            "handlers": ["console"],
            "level": log_level,
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"],
            "level": log_level if debug else "ERROR",
            "propagate": False,
        },
        "django.db.backends": {
            "handlers": ["console"] if debug else ["null"],
            "level": "DEBUG" if debug else "INFO",
            "propagate": False,
        },
    }
    for name in APP_LOGGERS:
        loggers[name] = {
            "handlers": ["console"],
            "level": log_level,
            "propagate": False,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": {
            "console": console,
            "null": {
                "class": "logging.NullHandler",
            },
        },
        "loggers": loggers,
    }


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs JSON lines with consistent fields:
    - timestamp: ISO 8601 UTC timestamp
    - level: Log level name
    - logger: Logger name
    - message: Log message
    - location: file, line and function of the call
    - exception: formatted traceback, when present
    - extra: Any extra fields passed to the logger
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry = {
            "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            log_entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extras = {}
        for key, value in record.__dict__.items():
            if key in STANDARD_ATTRS:
                continue
            try:
                json.dumps(value)
                extras[key] = value
            except (TypeError, ValueError):
                extras[key] = str(value)

        if extras:
            log_entry["extra"] = extras

        return json.dumps(log_entry, default=str)
