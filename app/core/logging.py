"""GSC Connector — Structured JSON Logging.

Every logger lives under ``gsc.`` and writes one JSON object per line.
Request context (site, item index, row counts) is passed through
``extra=`` and lifted into top-level keys.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional

from app.config import settings

ROOT_LOGGER = "gsc"
EXTRA_FIELDS = ("endpoint", "site_url", "item_index", "rows", "status_code")


class JSONFormatter(logging.Formatter):
    """Produces one JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception_type"] = record.exc_info[0].__name__
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value
        return json.dumps(log_entry, default=str)


def _resolve_level(level: Optional[str]) -> int:
    return getattr(logging, (level or settings.log_level).upper(), logging.INFO)


def configure_logging(level: Optional[str] = None, stream=None) -> logging.Logger:
    """Attach the JSON handler to the ``gsc`` root logger and set its level.

    Safe to call again: the existing handler is re-pointed, not duplicated.
    """
    root = logging.getLogger(ROOT_LOGGER)
    resolved = _resolve_level(level)
    handler = next(
        (h for h in root.handlers if isinstance(h.formatter, JSONFormatter)), None
    )
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    elif stream is not None:
        handler.setStream(stream)
    handler.setLevel(resolved)
    root.setLevel(resolved)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a named child of the ``gsc`` logger."""
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
