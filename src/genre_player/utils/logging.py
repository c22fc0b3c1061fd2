"""Console logging: colored level names and the dictConfig used by the player."""

from __future__ import annotations

import logging
import logging.config
import os
import sys
from typing import Any, TextIO

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Chatty per-request loggers that stay at WARNING unless debugging.
QUIET_LOGGERS = ("httpx", "httpcore", "genre_player.application.services.request_serializer")


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI color.

    Color is off when ``NO_COLOR`` is set or the target stream is not a TTY.
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str | None = DEFAULT_FORMAT,
        datefmt: str | None = DEFAULT_DATEFMT,
        *,
        stream: TextIO | None = None,
    ) -> None:
        super().__init__(fmt, datefmt)
        self._stream = stream

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stderr
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if self._use_color():
            color = self.COLORS.get(record.levelno, "")
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def build_logging_config(log_level: str = "INFO", *, debug: bool = False) -> dict[str, Any]:
    """dictConfig payload routing everything to a colored stderr handler."""
    level = log_level.upper()
    quiet_level = level if debug else "WARNING"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colored": {
                "()": ColoredFormatter,
                "fmt": DEFAULT_FORMAT,
                "datefmt": DEFAULT_DATEFMT,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "colored",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {name: {"level": quiet_level} for name in QUIET_LOGGERS},
        "root": {"level": level, "handlers": ["console"]},
    }


def setup_logging(log_level: str = "INFO", *, debug: bool = False) -> None:
    try:
        logging.config.dictConfig(build_logging_config(log_level, debug=debug))
    except (ValueError, TypeError) as exc:
        logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)
        logging.getLogger(__name__).warning("Invalid logging config, falling back to basic config: %s", exc)
