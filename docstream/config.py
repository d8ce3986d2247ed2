"""
Environment configuration.

Environment Variables:
    DOCSTREAM_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    DOCSTREAM_LOG_FORMAT: Log format (json, text) - default: json
    DOCSTREAM_LOG_PATH: Default commit log path for the CLI

Protocol constants (size limits, codecs) are not configurable.
"""

import os
from dataclasses import dataclass

DEFAULT_LOG_PATH = "/tmp/docstream/commits.jsonl"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_FORMATS = ("json", "text")


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_format: str = "json"
    log_path: str = DEFAULT_LOG_PATH

    @staticmethod
    def from_env() -> "Settings":
        level = os.getenv("DOCSTREAM_LOG_LEVEL", "INFO").upper()
        fmt = os.getenv("DOCSTREAM_LOG_FORMAT", "json").lower()
        return Settings(
            log_level=level if level in _LEVELS else "INFO",
            log_format=fmt if fmt in _FORMATS else "json",
            log_path=os.getenv("DOCSTREAM_LOG_PATH") or DEFAULT_LOG_PATH,
        )
