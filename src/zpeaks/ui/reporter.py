"""Console-based reporter implementation using Rich."""

from __future__ import annotations

import logging

from zpeaks.ui.messages import action, error, info, success, warning

logger = logging.getLogger("zpeaks.run")


class ConsoleReporter:
    """Reporter that prints styled messages and mirrors them to the log.

    Example:
        >>> reporter = ConsoleReporter()
        >>> reporter.action("Smoothing chr1...")
        >>> reporter.success("Wrote 1,024 peaks")
    """

    def action(self, message: str) -> None:
        action(message)
        logger.debug(message)

    def info(self, message: str) -> None:
        info(message)
        logger.debug(message)

    def warning(self, message: str) -> None:
        warning(message)
        logger.debug(message)

    def error(self, message: str) -> None:
        error(message)
        logger.debug(message)

    def success(self, message: str) -> None:
        success(message)
        logger.debug(message)


__all__ = ["ConsoleReporter"]
