"""
Logging setup for docstream processes.

Records carry a trace_id; the reducer and replay runner set it to the stream
id, so every line about one stream can be grepped or filtered together.

Usage:
    from docstream.logging_config import setup_logging, get_logger

    setup_logging()
    log = get_logger(__name__, trace_id=str(stream_id))
    log.info("Applied commit", extra={"kind": "data"})
"""

import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from .config import Settings

NO_TRACE = "N/A"

JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s"
JSON_RENAMES = {"asctime": "timestamp", "name": "logger", "levelname": "level"}
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s [trace_id=%(trace_id)s]"


class TraceIDFilter(logging.Filter):
    """Fills trace_id on records logged without a LoggerAdapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "trace_id", None) is None:
            record.trace_id = NO_TRACE  # type: ignore[attr-defined]
        return True


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter(JSON_FIELDS, rename_fields=JSON_RENAMES)
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Install a single stderr handler on the root logger.

    Without explicit settings the DOCSTREAM_LOG_* environment variables are
    used. Calling it again replaces the previous handler.
    """
    settings = settings or Settings.from_env()
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(TraceIDFilter())
    handler.setFormatter(_build_formatter(settings.log_format))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.setLevel(level)
    root.addHandler(handler)


def get_logger(name: str, trace_id: Optional[str] = None) -> logging.LoggerAdapter:
    """Logger whose records are tagged with trace_id (usually a stream id)."""
    return logging.LoggerAdapter(logging.getLogger(name), {"trace_id": trace_id or NO_TRACE})
