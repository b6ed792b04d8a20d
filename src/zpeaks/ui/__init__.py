"""UI and terminal output styling for ZPeaks.

Submodules:
- console: Theme and console instance
- logging: Logging setup (Rich console handler, text/JSON file handler)
- messages: Status messages and summary tables
- reporter: Reporter implementation printing to the console
"""

from zpeaks.ui.console import VERSION, ZPEAKS_THEME, console
from zpeaks.ui.logging import close_logging, setup_logging
from zpeaks.ui.messages import action, error, info, print_summary, show_header, success, warning
from zpeaks.ui.reporter import ConsoleReporter

__all__ = [
    "VERSION",
    "ZPEAKS_THEME",
    "ConsoleReporter",
    "action",
    "close_logging",
    "console",
    "error",
    "info",
    "print_summary",
    "setup_logging",
    "show_header",
    "success",
    "warning",
]
