"""Command-line interface for ZPeaks."""

from zpeaks.cli.app import app

__all__ = ["app"]
