"""Shared logging configuration for the API and worker processes.

Records emitted while a drain pass is running carry the pass number as
``drain_pass``; per-record messages also pass ``queue_id`` through ``extra``.
Both end up in the JSON stream output and in the in-memory buffer served by
``GET /api/logs``.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from pythonjsonlogger import jsonlogger

DEFAULT_BUFFER_SIZE = 200
CONTEXT_FIELDS = ("drain_pass", "queue_id")

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, Any]] = deque(maxlen=DEFAULT_BUFFER_SIZE)
_DRAIN_PASS: ContextVar[Optional[int]] = ContextVar("drain_pass", default=None)


@contextmanager
def drain_pass_context(pass_number: int) -> Iterator[None]:
    """Tag every record logged by this thread with ``drain_pass`` until exit."""
    token = _DRAIN_PASS.set(pass_number)
    try:
        yield
    finally:
        _DRAIN_PASS.reset(token)


class _ContextFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        if getattr(record, "drain_pass", None) is None:
            record.drain_pass = _DRAIN_PASS.get()
        return True


class LogBufferHandler(logging.Handler):
    """Keep the newest records in memory for the ``/logs`` endpoint."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry: dict[str, Any] = {
                "time": timestamp.isoformat().replace("+00:00", "Z"),
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
            }
            if getattr(record, "drain_pass", None) is None:
                record.drain_pass = _DRAIN_PASS.get()
            for name in CONTEXT_FIELDS:
                value = getattr(record, name, None)
                if value is not None:
                    entry[name] = value
            _LOG_BUFFER.appendleft(entry)
        except Exception:
            self.handleError(record)


def setup_logging(service_name: Optional[str] = None, buffer_size: Optional[int] = None) -> None:
    """Configure root logging with a JSON formatter and drain-pass metadata."""

    global _CONFIGURED, _LOG_BUFFER
    if _CONFIGURED:
        return

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    service = service_name or os.getenv("SERVICE_NAME", "fleet-sync")
    if buffer_size is not None and buffer_size != _LOG_BUFFER.maxlen:
        _LOG_BUFFER = deque(_LOG_BUFFER, maxlen=buffer_size)

    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(service)s %(drain_pass)s"
        )
    )
    handler.addFilter(_ContextFilter(service))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.addHandler(LogBufferHandler())
    root.setLevel(log_level)
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(limit: int = 100, min_level: Optional[str] = None) -> list[dict[str, Any]]:
    """Newest entries first, optionally only those at or above ``min_level``."""
    entries = list(_LOG_BUFFER)
    if min_level is not None:
        threshold = logging.getLevelName(min_level.upper())
        entries = [e for e in entries if logging.getLevelName(e["level"]) >= threshold]
    return entries[:limit]


__all__ = [
    "setup_logging",
    "get_log_buffer",
    "drain_pass_context",
    "LogBufferHandler",
    "DEFAULT_BUFFER_SIZE",
]
