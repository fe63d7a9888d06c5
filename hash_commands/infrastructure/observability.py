"""Structured Logging — one JSON object per record, dispatch context included.

Invariants:
    - Every record carries timestamp, level, logger and message
    - Dispatch extras (method, command, error_code, position, path) appear only
      when set on the record; None values are left out
    - setup_logging is idempotent: calling it again replaces its own handler
"""

import json
import logging
from datetime import datetime, timezone

DISPATCH_FIELDS = ("method", "command", "error_code", "position", "path")
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Render LogRecords as JSON lines."""

    def __init__(self, fields: tuple[str, ...] = DISPATCH_FIELDS):
        super().__init__()
        self.fields = fields

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (name, value) for name in self.fields
            if (value := getattr(record, name, None)) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


_handler: logging.Handler | None = None


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the service's root handler. Returns it."""
    global _handler
    if _handler is not None:
        logging.root.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    logging.root.addHandler(_handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return _handler
