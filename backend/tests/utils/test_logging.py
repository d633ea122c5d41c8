# backend/tests/utils/test_logging.py
"""
Tests for logging setup, the run id filter and the JSON formatter.
"""

import json
import logging

import pytest

from portfolio_insights.utils.context import bind_run_id
from portfolio_insights.utils.logging import (
    NO_RUN_ID,
    JsonFormatter,
    RunIdFilter,
    _get_log_level,
    get_logger,
    setup_logging,
)


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="portfolio_insights.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestRunIdFilter:
    """Tests for RunIdFilter."""

    def test_placeholder_without_run_id(self):
        record = _record()

        assert RunIdFilter().filter(record)
        assert record.run_id == NO_RUN_ID

    def test_stamps_bound_run_id(self):
        record = _record()

        with bind_run_id("refresh-9"):
            RunIdFilter().filter(record)

        assert record.run_id == "refresh-9"


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_core_fields(self):
        record = _record("Excluding AAPL", run_id="abc")

        entry = json.loads(JsonFormatter().format(record))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "portfolio_insights.test"
        assert entry["run_id"] == "abc"
        assert entry["message"] == "Excluding AAPL"
        assert "extra" not in entry

    def test_extra_fields_and_non_serializable_values(self):
        record = _record(ticker="AAPL", amount=object())

        entry = json.loads(JsonFormatter().format(record))

        assert entry["extra"]["ticker"] == "AAPL"
        assert entry["extra"]["amount"].startswith("<object object")


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_json_format(self, restore_root_logger):
        setup_logging(level="DEBUG", log_format="json")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)
        assert any(isinstance(f, RunIdFilter) for f in handler.filters)

    def test_text_format(self, restore_root_logger):
        setup_logging(level="warning", log_format="text")

        handler = restore_root_logger.handlers[0]
        assert not isinstance(handler.formatter, JsonFormatter)
        assert "%(run_id)s" in handler.formatter._fmt
        assert restore_root_logger.level == logging.WARNING

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            _get_log_level("LOUD")

    def test_get_logger(self):
        assert get_logger("portfolio_insights.x").name == "portfolio_insights.x"
