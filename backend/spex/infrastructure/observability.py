"""Structured Logging — JSON and key=value formatters for card events.

Invariants:
    - Every record carries timestamp, level, logger, message and service="spex-api"
    - Card context (uid, kind, purpose, count) and request context (path, status,
      error_code) surfaced when passed as `extra`
    - Owner emails never reach the log sink in clear: `email` extras are masked
    - setup_logging is idempotent: re-running it replaces, not stacks, its handler

Design Decisions:
    - JSONFormatter over third-party libs: stdlib only, one JSON object per line
    - Text format in development keeps the same extras as trailing key=value pairs
    - SQLAlchemy engine chatter capped at WARNING unless the app runs at DEBUG
"""

import logging
import json
from datetime import datetime, timezone

SERVICE_NAME = "spex-api"

EXTRA_FIELDS = (
    "uid", "kind", "purpose", "count", "email",
    "path", "status", "error_code",
)

_HANDLER_NAME = "spex"


def mask_email(value: str) -> str:
    """ada@example.com -> a***@example.com"""
    local, sep, domain = value.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def _extras(record: logging.LogRecord) -> dict:
    found = {}
    for key in EXTRA_FIELDS:
        val = record.__dict__.get(key)
        if val is None:
            continue
        if key == "email":
            val = mask_email(str(val))
        found[key] = val
    return found


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shipping in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class KeyValueFormatter(logging.Formatter):
    """Human-readable line with card context appended as key=value pairs."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure root logging for the API process."""
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else KeyValueFormatter())

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)

    resolved = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(resolved)
    logging.getLogger("sqlalchemy.engine").setLevel(
        resolved if resolved <= logging.DEBUG else logging.WARNING,
    )
