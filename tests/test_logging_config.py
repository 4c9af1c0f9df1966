"""Tests for logging setup: config defaults, handlers and context fields."""

import logging

import pytest

from jadugar_calc import config
from jadugar_calc.logging_config import (
    ROOT_LOGGER,
    StructuredFormatter,
    get_logger,
    setup_logging,
)
from jadugar_calc.types import ErrorKind


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    setup_logging(level="WARNING", log_file=None)


class TestSetupLogging:
    def test_level_defaults_to_config(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "DEBUG")
        logger = setup_logging()
        assert logger.name == ROOT_LOGGER
        assert logger.level == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "DEBUG")
        assert setup_logging(level="error").level == logging.ERROR

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_log_file_receives_context_fields(self, tmp_path, monkeypatch):
        log_path = tmp_path / "calc.log"
        monkeypatch.setattr(config, "LOG_FILE", str(log_path))
        logger = setup_logging()
        assert len(logger.handlers) == 2
        get_logger("test").warning(
            "hello", extra={"error_code": ErrorKind.PARSE_ERROR, "subject": "x"}
        )
        for handler in logger.handlers:
            handler.flush()
        text = log_path.read_text(encoding="utf-8")
        assert "[WARNING] jadugar_calc.test: hello error_code=PARSE_ERROR subject=x" in text


class TestStructuredFormatter:
    def _record(self, **extra):
        record = logging.LogRecord(
            "jadugar_calc.solver", logging.INFO, __file__, 1, "Solve %s", ("x^2",), None
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_plain_message(self):
        line = StructuredFormatter().format(self._record())
        assert line.endswith("[INFO] jadugar_calc.solver: Solve x^2")

    def test_only_present_fields_are_appended(self):
        line = StructuredFormatter().format(self._record(subject="x"))
        assert line.endswith("Solve x^2 subject=x")
        assert "error_code" not in line
