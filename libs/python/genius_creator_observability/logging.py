"""JSON logging for GeniusCreator processes.

Fields bound with :func:`log_context` (session epoch, step, unit, chapter
index, provider, run id) are attached to every record emitted inside the
block, including records from tasks spawned there, since ``asyncio`` copies
the current context into new tasks.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Mapping

LOG_LEVEL_ENV_VAR = "GENIUS_CREATOR_LOG_LEVEL"
CAPTURE_WARNINGS_ENV_VAR = "GENIUS_CREATOR_CAPTURE_WARNINGS"

_BOUND_FIELDS: ContextVar[Mapping[str, Any]] = ContextVar("genius_creator_log_fields", default={})

# Attributes every LogRecord carries; anything else came from ``extra`` or the context.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class ContextFilter(logging.Filter):
    """Copy the bound context onto each record and stamp the service name."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _BOUND_FIELDS.get().items():
            # Explicit ``extra`` values win over the surrounding context.
            if not hasattr(record, key):
                setattr(record, key, value)
        if getattr(record, "service", None) is None:
            record.service = self.service_name
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, then custom fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or key.startswith("_") or value is None:
                continue
            payload[key] = value if _is_json_safe(value) else repr(value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def _is_json_safe(value: Any) -> bool:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "t", "yes", "y"}


def build_logging_config(service_name: str, level: str | int) -> Dict[str, Any]:
    """dictConfig payload routing the root and uvicorn loggers to one JSON stdout handler."""

    handler = {
        "class": "logging.StreamHandler",
        "stream": sys.stdout,
        "formatter": "json",
        "filters": ["context"],
    }
    server_logger = {"handlers": ["stdout"], "level": level, "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": JsonFormatter}},
        "filters": {"context": {"()": ContextFilter, "service_name": service_name}},
        "handlers": {"stdout": handler},
        "root": {"level": level, "handlers": ["stdout"]},
        "loggers": {
            name: dict(server_logger) for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
        },
    }


def setup_logging(
    service_name: str,
    level: str | int | None = None,
    *,
    capture_warnings: bool | None = None,
) -> None:
    """Configure JSON logging for the current process.

    ``level`` falls back to ``GENIUS_CREATOR_LOG_LEVEL`` and then ``INFO``;
    ``capture_warnings`` falls back to ``GENIUS_CREATOR_CAPTURE_WARNINGS``.
    Safe to call more than once.
    """

    level = level or os.getenv(LOG_LEVEL_ENV_VAR, "INFO")
    logging.config.dictConfig(build_logging_config(service_name, level))
    if capture_warnings is None:
        capture_warnings = _env_flag(CAPTURE_WARNINGS_ENV_VAR)
    logging.captureWarnings(capture_warnings)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind ``fields`` to log records for the duration of the block.

    A ``None`` value unbinds a field inherited from an outer block.
    """

    merged = {**_BOUND_FIELDS.get(), **fields}
    token = _BOUND_FIELDS.set({key: value for key, value in merged.items() if value is not None})
    try:
        yield
    finally:
        _BOUND_FIELDS.reset(token)


__all__ = ["ContextFilter", "JsonFormatter", "build_logging_config", "log_context", "setup_logging"]
