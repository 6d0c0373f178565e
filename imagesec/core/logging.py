"""Structured JSON logging configuration.

Every log line is a single JSON object so CI log collection can parse it:

    {"ts": "2025-03-01T12:00:00+00:00", "level": "WARNING", "logger": "imagesec.services.scan_service", "msg": "..."}

The CLI sends logs to stderr, keeping stdout free for ``KEY=value`` output.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import TextIO


class JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        # Attached by the scan pipeline via extra={"scan_id": ...}
        if hasattr(record, "scan_id"):
            payload["scan_id"] = record.scan_id

        if hasattr(record, "tool"):
            payload["tool"] = record.tool

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(stream: TextIO | None = None) -> None:
    """Configure root logger with JSON output.

    The log level is controlled by the ``LOG_LEVEL`` env var
    (default ``INFO``). Output goes to stdout unless ``stream`` is given.
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(level)

    root.handlers.clear()
    root.addHandler(handler)

    for noisy in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
