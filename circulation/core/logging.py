"""Logging configuration for the engine."""
import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level and logger name for terminals."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        # Format a copy so other handlers still see the plain record
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]
        record.levelname = f"{color}{record.levelname}{reset}"
        record.name = f"\033[34m{record.name}{reset}"
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    colors: Optional[bool] = None,
) -> logging.Logger:
    """Attach one handler to the ``circulation`` logger tree.

    Colors default to on only when ``stream`` is a terminal. Calling this
    again replaces the previous handler.
    """
    stream = stream or sys.stdout
    if colors is None:
        colors = hasattr(stream, "isatty") and stream.isatty()

    logger = logging.getLogger("circulation")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers = []

    handler = logging.StreamHandler(stream)
    formatter_class = ColoredFormatter if colors else logging.Formatter
    handler.setFormatter(formatter_class(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    # Uvicorn configures the root logger; keep our lines out of it
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for one part of the engine, e.g. ``get_logger("ledger")``."""
    return logging.getLogger(f"circulation.{name}")
