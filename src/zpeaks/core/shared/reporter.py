"""Progress and status reporting abstraction.

Run orchestrators report what they are doing through the ``Reporter``
protocol so the core never depends on a particular UI:

    - NullReporter discards everything (tests, library use)
    - LoggingReporter forwards to the ``zpeaks`` logger hierarchy
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class Reporter(Protocol):
    """Protocol for progress and status reporting."""

    def action(self, message: str) -> None:
        """Report an action being performed, e.g. 'Smoothing chr1...'."""
        ...

    def info(self, message: str) -> None:
        """Report an informational message."""
        ...

    def warning(self, message: str) -> None:
        """Report a non-fatal issue, e.g. a skipped chromosome."""
        ...

    def error(self, message: str) -> None:
        """Report an error that did not stop the run."""
        ...

    def success(self, message: str) -> None:
        """Report successful completion."""
        ...


class NullReporter:
    """Silent reporter that discards all messages."""

    def action(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass


class LoggingReporter:
    """Reporter that writes to Python logging.

    Example:
        >>> reporter = LoggingReporter("zpeaks.run")
        >>> reporter.action("Calling peaks on chr1...")  # INFO level
        >>> reporter.warning("Background was zero")  # WARNING level
    """

    def __init__(self, logger_name: str = "zpeaks") -> None:
        self._logger = logging.getLogger(logger_name)

    def action(self, message: str) -> None:
        """Log action at INFO level with prefix."""
        self._logger.info("[ACTION] %s", message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def success(self, message: str) -> None:
        """Log success at INFO level with prefix."""
        self._logger.info("[SUCCESS] %s", message)


__all__ = ["LoggingReporter", "NullReporter", "Reporter"]
