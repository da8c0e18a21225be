"""Structured Logging — one JSON object per record, dispatch fields flattened in.

Invariants:
    - Every record carries timestamp (record creation time, UTC), level, logger, message
    - Dispatch fields (operation, error_code, path, locale, user, parameter) appear
      only when the caller passed them via `extra=` and they are not None
    - setup_logging owns exactly one root handler; calling it again swaps that
      handler instead of stacking a second one

Design Decisions:
    - Plain logging + a Formatter subclass, no logging framework
    - "text" format is for local runs; anything else is treated as JSON
"""

import logging
import json
from datetime import datetime, timezone

DISPATCH_FIELDS = (
    "operation", "error_code", "path", "locale", "user", "parameter",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Serialize a record and its dispatch fields as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            name: getattr(record, name)
            for name in DISPATCH_FIELDS
            if getattr(record, name, None) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


_installed: logging.Handler | None = None


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the service's root handler, replacing a previous one."""
    global _installed
    handler = logging.StreamHandler()
    if fmt == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    if _installed is not None:
        root.removeHandler(_installed)
    root.addHandler(handler)
    value = logging.getLevelName(level.upper())
    root.setLevel(value if isinstance(value, int) else logging.INFO)
    _installed = handler
    return handler
