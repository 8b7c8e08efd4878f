"""Colored logging formatter for console output."""

from __future__ import annotations

import logging
import os
import sys


class ColoredFormatter(logging.Formatter):
    """Logging formatter that colours the level name and dims the logger name.

    Colours are disabled when the ``NO_COLOR`` environment variable is set or
    when stderr is not a TTY (e.g. redirected to a file). ``FORCE_COLOR``
    re-enables them for non-TTY output such as container logs.
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",     # cyan
        logging.INFO: "\033[32m",      # green
        logging.WARNING: "\033[33m",   # yellow
        logging.ERROR: "\033[31m",     # red
        logging.CRITICAL: "\033[1;31m",  # bold red
    }
    DIM = "\033[2m"
    RESET = "\033[0m"

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        if os.environ.get("FORCE_COLOR") is not None:
            return True
        stream = getattr(self, "_stream", None) or sys.stderr
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if self._use_color():
            color = self.COLORS.get(record.levelno, "")
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
            record.name = f"{self.DIM}{record.name}{self.RESET}"
        return super().format(record)

