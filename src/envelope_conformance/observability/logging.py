"""Centralized logging setup for envelope-conformance.

Log records are written as JSON lines to stderr so that reports printed on
stdout can be piped without interleaved log output.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Any, Optional

ROOT_LOGGER = "envelope_conformance"


class JsonFormatter(logging.Formatter):
    """Logging formatter that outputs one JSON object per record."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Standard LogRecord attributes never leak into the output as extras
        dummy_record = logging.LogRecord("name", logging.INFO, "path", 1, "msg", None, None)
        self._reserved_attrs = set(dummy_record.__dict__.keys())
        self._reserved_attrs.update({"message", "asctime", "stack_info", "taskName"})

    def format(self, record: logging.LogRecord) -> str:
        """Formats a log record as a JSON string."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "component": record.name,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in self._reserved_attrs:
                continue
            if key == "extra_fields" and isinstance(value, dict):
                log_entry.update(value)
            else:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None):
    """Initializes logging for the checker.

    Args:
        level: Optional log level override. Defaults to the LOG_LEVEL env var
            or WARNING, so a plain CLI run prints only the report.
        stream: Destination stream. Defaults to stderr.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "WARNING")).upper()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())

    # Repeated CLI invocations in one process must not stack handlers
    for h in logger.handlers[:]:
        logger.removeHandler(h)

    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Retrieves a logger with the given name.

    Args:
        name: The name of the logger (typically __name__).

    Returns:
        A logging.Logger instance.
    """
    return logging.getLogger(name)
