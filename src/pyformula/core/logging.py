"""
Logging configuration for PyFormula.

The library only emits records through ``get_logger(__name__)`` loggers and
never installs handlers on import. Hosts that want PyFormula's own output call
``setup_logging``, which attaches a JSON or colored console handler to the
``pyformula`` logger.
"""

import logging
import sys
from typing import Any

import orjson

from pyformula.core.config import get_settings

# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

# Context keys lifted to the top level of JSON records.
_CONTEXT_KEYS = ("formula", "function_name", "position")


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, encoded with orjson.

    Formula context (``formula``, ``function_name``, ``position``) is emitted
    at the top level; any other ``extra`` fields are nested under ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        extra = _extra_fields(record)
        for key in _CONTEXT_KEYS:
            if key in extra:
                payload[key] = extra.pop(key)
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return orjson.dumps(payload, default=str).decode("utf-8")


class ConsoleFormatter(logging.Formatter):
    """Colored single-line output for development, with ``extra`` appended as key=value pairs."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        record.levelname = f"{self.COLORS.get(levelname, self.RESET)}{levelname}{self.RESET}"
        try:
            line = super().format(record)
        finally:
            # Other handlers see the same record.
            record.levelname = levelname

        extra = _extra_fields(record)
        if not extra:
            return line
        context = " ".join(f"{key}={value!r}" for key, value in extra.items())
        # Keep any traceback after the context.
        head, sep, tail = line.partition("\n")
        return f"{head} [{context}]{sep}{tail}"


def setup_logging(
    log_level: str | None = None,
    json_logs: bool | None = None,
    log_format: str | None = None,
) -> None:
    """
    Send ``pyformula`` log records to stdout.

    Calling it again replaces the handler installed by the previous call.

    Args:
        log_level: Level name; defaults to ``settings.log_level``
        json_logs: Emit JSON; defaults to ``settings.json_logs``
        log_format: Format string for console output
    """
    settings = get_settings()
    level = (log_level or settings.log_level).upper()
    use_json = settings.json_logs if json_logs is None else json_logs

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            ConsoleFormatter(
                log_format or "%(asctime)s %(levelname)-8s %(name)s - %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    package_logger = logging.getLogger("pyformula")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)

    package_logger.debug("Logging configured", extra={"log_level": level, "json_logs": use_json})


def get_logger(name: str) -> logging.Logger:
    """Return the standard library logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)
