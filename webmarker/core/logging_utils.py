from __future__ import annotations

import datetime as dt
import json
import logging
import sys
import uuid
from typing import Any

from loguru import logger as loguru_logger

UTC = dt.UTC

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_FIELDS = frozenset(
    {
        "args",
        "msg",
        "name",
        "levelno",
        "levelname",
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
        "getMessage",
        "message",
    }
)


def _record_extra(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if not key.startswith("_") and key not in _STANDARD_FIELDS
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields grouped under ``extra``."""

    def __init__(self, include_location: bool = True) -> None:
        super().__init__()
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "timestamp": dt.datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_location:
            base.update(
                {
                    "module": record.module,
                    "function": record.funcName,
                    "line": record.lineno,
                }
            )

        if record.exc_info:
            base["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = _record_extra(record)
        correlation_id = extra_fields.pop("correlation_id", None)
        if correlation_id:
            base["correlation_id"] = correlation_id
        if extra_fields:
            base["extra"] = extra_fields

        return json.dumps(base, ensure_ascii=False, default=str, separators=(",", ":"))


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping ``extra`` fields bound."""

    def emit(self, record: logging.LogRecord) -> None:
        level_to_use: int | str
        try:
            level_to_use = loguru_logger.level(record.levelname).name
        except ValueError:
            level_to_use = record.levelno

        loguru_logger.bind(**_record_extra(record)).opt(depth=6, exception=record.exc_info).log(
            level_to_use, record.getMessage()
        )


def setup_json_logging(
    level: str = "INFO",
    use_loguru: bool = True,
    log_file: str | None = None,
    include_location: bool = True,
) -> None:
    """Configure JSON logging for the whole process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_loguru: Route stdlib logging through loguru sinks
        log_file: Optional log file path; loguru rotates it at 10 MB
        include_location: Include module/function/line in stdlib JSON output
    """
    lvl = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(lvl)

    if use_loguru:
        loguru_logger.remove()
        loguru_logger.add(sys.stdout, level=level.upper(), serialize=True, backtrace=True)
        if log_file:
            loguru_logger.add(
                log_file,
                level=level.upper(),
                serialize=True,
                rotation="10 MB",
                retention="14 days",
                compression="gz",
            )
        root.addHandler(InterceptHandler())
        loguru_logger.info("json_logging_initialized", backend="loguru", level=level)
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter(include_location=include_location))
    root.addHandler(console_handler)

    if log_file:
        from logging.handlers import RotatingFileHandler

        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(JsonFormatter(include_location=include_location))
        root.addHandler(file_handler)

    logging.getLogger(__name__).info(
        "json_logging_initialized", extra={"backend": "stdlib", "level": level}
    )


def generate_correlation_id() -> str:
    """Generate a short id that ties together the log lines of one workflow."""
    return uuid.uuid4().hex[:12]


__all__ = [
    "InterceptHandler",
    "JsonFormatter",
    "generate_correlation_id",
    "setup_json_logging",
]
