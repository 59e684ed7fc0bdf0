"""
Centralized Logging

Architectural Intent:
- Structured JSON or human-readable logging for all alertbridge components
- Supports configurable log levels via CLI flags (--verbose, --debug) and config
- Alert and incident ids passed through ``extra`` appear in every format,
  so one alert can be followed from ingress to its incident
"""

import json
import logging
import sys
from datetime import datetime, UTC

TRACE_FIELDS = ("alert_id", "incident_id")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(trace)s %(message)s"


def _trace_ids(record: logging.LogRecord) -> dict[str, str]:
    ids = {}
    for name in TRACE_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            ids[name] = value
    return ids


class TraceContextFilter(logging.Filter):
    """Renders trace ids into ``record.trace`` for the text format."""

    def filter(self, record: logging.LogRecord) -> bool:
        ids = _trace_ids(record)
        record.trace = "".join(f" {k}={v}" for k, v in ids.items())
        return True


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_trace_ids(record),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
) -> None:
    """Configure the ``alertbridge`` logger hierarchy.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, etc.)
        json_format: If True, one JSON object per line. Otherwise TEXT_FORMAT.
    """
    app_logger = logging.getLogger("alertbridge")
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(TraceContextFilter())
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    app_logger.addHandler(handler)


def level_from_name(name: str, default: int = logging.WARNING) -> int:
    """Map a config level name ("info", "DEBUG") to a logging level."""
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default
