"""Tests for logging setup and the log handlers."""
import json
import logging

import pytest

from catalog_sheet.config import LOG_SHEET_NAME
from catalog_sheet.logging_config import (
    LOG_SHEET_HEADERS,
    JSONLFileHandler,
    get_logger,
    log_catalog_event,
    setup_logging,
)
from catalog_sheet.notifications import Notifier
from catalog_sheet.sheet import Workbook


@pytest.fixture
def package_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger("catalog_sheet")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


class TestSetupLogging:
    def test_jsonl_file_receives_events(self, tmp_path, package_logger):
        setup_logging(log_to_console=False, log_dir=tmp_path)

        log_catalog_event("setup", {"message": "Setup done", "rows": 3})

        files = list(tmp_path.glob("catalog_*.jsonl"))
        assert len(files) == 1
        entry = json.loads(files[0].read_text(encoding="utf-8").splitlines()[-1])
        assert entry["message"] == "Setup done"
        assert entry["event_type"] == "setup"
        assert entry["rows"] == 3

    def test_warnings_go_to_log_sheet(self, package_logger):
        workbook = Workbook()
        setup_logging(log_to_console=False, log_to_file=False, workbook=workbook)

        get_logger("test").info("quiet")
        get_logger("test").warning("loud")

        sheet = workbook.get_sheet(LOG_SHEET_NAME)
        assert sheet.header_row() == LOG_SHEET_HEADERS
        assert sheet.last_row == 2
        assert sheet.get_value(2, 2) == "WARNING"
        assert sheet.get_value(2, 3) == "loud"

    def test_exception_stack_is_recorded(self, tmp_path, package_logger):
        setup_logging(log_to_console=False, log_dir=tmp_path)

        try:
            raise ValueError("bad value")
        except ValueError:
            get_logger("test").exception("failed")

        entry = json.loads(next(tmp_path.glob("*.jsonl")).read_text(encoding="utf-8").splitlines()[-1])
        assert "ValueError: bad value" in entry["stack"]

    def test_get_logger_prefix(self):
        assert get_logger("orchestrator").name == "catalog_sheet.orchestrator"
        assert get_logger().name == "catalog_sheet"


class TestJSONLFileHandler:
    def test_creates_directory(self, tmp_path):
        log_dir = tmp_path / "nested" / "logs"
        JSONLFileHandler(log_dir)
        assert log_dir.is_dir()


class TestNotifier:
    def test_records_and_forwards(self):
        notifier = Notifier()
        seen = []
        notifier.register_listener(seen.append)

        notice = notifier.notify("Saved", "info")

        assert notice.severity == "INFO"
        assert seen == [notice]
        assert notifier.messages() == ["Saved"]

    def test_failing_listener_does_not_raise(self):
        notifier = Notifier()

        def broken(_notice):
            raise RuntimeError("display gone")

        notifier.register_listener(broken)

        notifier.notify("Still recorded", "WARNING")

        assert notifier.messages("WARNING") == ["Still recorded"]

    def test_unknown_severity_becomes_info(self):
        assert Notifier().notify("x", "LOUD").severity == "INFO"
