"""Logging configuration for the ZPeaks UI."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from zpeaks.ui.console import VERSION, console

LOGGER_NAME = "zpeaks"


class JSONFormatter(logging.Formatter):
    """JSON log formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


def setup_logging(
    log_file: Path | None = None,
    verbose: bool = False,
    level: int = logging.INFO,
    log_format: str = "text",
) -> logging.Logger:
    """Configure the ``zpeaks`` logger hierarchy.

    Warnings always reach the console; with ``verbose`` every record at
    ``level`` does. A log file, when given, receives every record at ``level``
    as plain text or JSON lines.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    close_logging()

    console_handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(level if verbose else logging.WARNING)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(level)
        if log_format == "json" or log_file.suffix == ".json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        logger.addHandler(file_handler)

    logger.debug("ZPeaks v%s | Command: %s", VERSION, " ".join(sys.argv))
    logger.debug("Python: %s | Platform: %s", sys.version.split()[0], sys.platform)
    return logger


def close_logging() -> None:
    """Detach and close every handler of the ``zpeaks`` logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)


__all__ = ["JSONFormatter", "close_logging", "setup_logging"]
