"""Logging setup for the backup function.

Options are passed in explicitly; ``LoggingOptions.from_env`` exists for the
Lambda and CLI entrypoints, which read ``FORMATTER_TYPE`` and ``LOG_LEVEL``.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional

PACKAGE_LOGGER = "cognito_backup"
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

FORMAT_TEXT = "TEXT"
FORMAT_JSON = "JSON"


class JsonFormatter(logging.Formatter):
    """Formats each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


@dataclass(frozen=True)
class LoggingOptions:
    format: str = FORMAT_TEXT
    level: str = "DEBUG"

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "LoggingOptions":
        return cls(
            format=env.get("FORMATTER_TYPE", FORMAT_TEXT),
            level=env.get("LOG_LEVEL", "DEBUG"),
        )

    @property
    def resolved_level(self) -> int:
        level = logging.getLevelName(str(self.level).strip().upper())
        return level if isinstance(level, int) else logging.DEBUG

    def build_formatter(self) -> logging.Formatter:
        if str(self.format).strip().upper() == FORMAT_JSON:
            return JsonFormatter()
        return logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)


def configure_logging(options: Optional[LoggingOptions] = None, stream=None) -> logging.Logger:
    """Install a single stream handler on the package logger and return it.

    Calling this again replaces the handler, so the latest options win.
    """
    options = options or LoggingOptions()
    logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in list(logger.handlers):
        if getattr(handler, "_cognito_backup_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(options.build_formatter())
    handler._cognito_backup_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(options.resolved_level)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or PACKAGE_LOGGER)
