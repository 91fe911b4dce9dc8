"""Structured Logging — JSON output for the fieldhooks logger hierarchy.

Invariants:
    - Every JSON line carries timestamp, level, logger and message
    - Dispatch extras (record_type, field_name, role, phase, reason, record_index,
      error_code) appear only when set on the record
    - setup_logging touches the "fieldhooks" logger only, never the root logger

Design Decisions:
    - Nothing is configured on import: the host application decides whether to
      call setup_logging or route "fieldhooks" records through its own handlers
"""

import logging
import json
from datetime import datetime, timezone

from fieldhooks.config import get_settings

PACKAGE_LOGGER = "fieldhooks"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_EXTRA_KEYS = (
    "record_type", "field_name", "role", "phase", "reason",
    "record_index", "error_code",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc)
        payload = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, record.__dict__[key])
            for key in _EXTRA_KEYS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # enum members and ObjectIds fall back to str()
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str | None = None, fmt: str | None = None) -> logging.Handler:
    """Attach a stream handler to the fieldhooks logger.

    Args:
        level: logging level name; defaults to Settings.log_level.
        fmt: "json" or "text"; defaults to Settings.log_format.

    Returns:
        The handler, so callers can remove it again.
    """
    settings = get_settings()
    fmt = (fmt or settings.log_format).lower()
    level_name = (level or settings.log_level).upper()

    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT)
    )
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    return handler
