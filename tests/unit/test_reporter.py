"""Tests for reporter abstraction and logging setup."""

import json
import logging
import sys

import pytest

from zpeaks.core.shared.reporter import LoggingReporter, NullReporter, Reporter
from zpeaks.ui import ConsoleReporter, close_logging, setup_logging
from zpeaks.ui.logging import JSONFormatter


class TestReporterProtocol:
    """Tests for Reporter protocol compliance."""

    @pytest.mark.parametrize("reporter_class", [NullReporter, LoggingReporter, ConsoleReporter])
    def test_satisfies_protocol(self, reporter_class):
        assert isinstance(reporter_class(), Reporter)


class TestLoggingReporter:
    """Tests for LoggingReporter."""

    def test_levels(self, caplog):
        reporter = LoggingReporter("zpeaks.test")
        with caplog.at_level(logging.INFO, logger="zpeaks.test"):
            reporter.action("Smoothing chr1")
            reporter.warning("Background for chromosome chr2 is zero")
            reporter.success("Done")

        assert [r.levelno for r in caplog.records] == [logging.INFO, logging.WARNING, logging.INFO]
        assert caplog.records[0].getMessage() == "[ACTION] Smoothing chr1"
        assert caplog.records[2].getMessage() == "[SUCCESS] Done"

    def test_null_reporter_is_silent(self, caplog):
        with caplog.at_level(logging.DEBUG):
            NullReporter().error("ignored")
        assert caplog.records == []


class TestSetupLogging:
    """Tests for the zpeaks logger configuration."""

    def teardown_method(self):
        close_logging()

    def test_text_log_file(self, tmp_path):
        log_file = tmp_path / "run.log"
        logger = setup_logging(log_file)
        logging.getLogger("zpeaks.core.algorithms.peaks").info("Calling peaks")
        close_logging()

        assert logger.name == "zpeaks"
        assert "| INFO  | zpeaks.core.algorithms.peaks | Calling peaks" in log_file.read_text()

    def test_json_log_file(self, tmp_path):
        log_file = tmp_path / "run.json"
        setup_logging(log_file, log_format="json")
        logging.getLogger("zpeaks.io.bed").warning("Writing %d peaks", 3)
        close_logging()

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert records[-1]["message"] == "Writing 3 peaks"
        assert records[-1]["level"] == "WARNING"
        assert records[-1]["logger"] == "zpeaks.io.bed"

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        setup_logging(tmp_path / "a.log")
        logger = setup_logging(tmp_path / "b.log")
        assert len(logger.handlers) == 2

    def test_formatter_includes_exception(self):
        try:
            msg = "boom"
            raise RuntimeError(msg)
        except RuntimeError:
            record = logging.LogRecord("zpeaks", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]
