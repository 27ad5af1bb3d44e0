"""
Central logging setup for the CLI.

Called once per invocation by the CLI callback. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.
"""

from __future__ import annotations

import json
import logging
import sys

# WARNING level and above: minimal, no noise
_FMT_MINIMAL = "%(message)s"

# INFO level: timestamped with module context
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG level: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d - %(message)s"

# Third-party loggers that are noisy at INFO/DEBUG
_NOISY_LOGGERS = ("urllib3", "github")

_HANDLER_NAME = "segtrace"


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(level: str = "info", fmt: str = "text") -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (debug, info, warn, error).
        fmt: ``text`` or ``json``.
    """
    numeric_level = _parse_level(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    elif numeric_level <= logging.DEBUG:
        handler.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_VERBOSE))
    elif numeric_level <= logging.INFO:
        handler.setFormatter(logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_VERBOSE))
    else:
        handler.setFormatter(logging.Formatter(_FMT_MINIMAL))

    handler.set_name(_HANDLER_NAME)
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric_level)

    if numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    if level.lower() == "warn":
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
