"""Structured JSON logging configuration."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from scripts.auth_export.errors import OperationResult

EXTRA_FIELDS = ("command", "dataset", "table", "status", "rows", "batches", "duration_s")


def result_extra(result: OperationResult, **fields: Any) -> dict[str, Any]:
    """Log extras describing an operation outcome; zero counts are omitted."""
    extra: dict[str, Any] = {"status": result.status}
    if result.rows:
        extra["rows"] = result.rows
    if result.batches:
        extra["batches"] = result.batches
    extra.update(fields)
    return extra


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line, export extras flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = _json_value(val)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO") -> None:
    """Send the auth_export logger tree to stderr as JSON lines."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger("auth_export")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = False
