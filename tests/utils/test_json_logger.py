# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the structured JSON logger.

We verify:
  - output is valid JSON
  - all mandatory fields are present (ts, level, module, msg)
  - log levels filter correctly, including re-leveling after creation
  - extra context fields and exceptions get merged into the JSON
"""

import json
import logging
from pathlib import Path

import pytest

from ptexamples.logging.logger import get_logger, set_log_level


@pytest.fixture(autouse=True)
def _reset_loggers() -> None:
    """
    Clear test logger handlers between tests so get_logger's handler-stacking
    guard doesn't interfere with test isolation.
    """
    yield  # type: ignore[misc]
    set_log_level("INFO")
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("ptexamples.test"):
            logging.getLogger(name).handlers.clear()


class TestJsonOutput:
    def test_output_is_valid_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("ptexamples.test.json", log_level="INFO")
        logger.info("hello")
        captured = capsys.readouterr()

        parsed = json.loads(captured.out.strip())
        assert isinstance(parsed, dict)

    def test_mandatory_fields_are_present(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("ptexamples.test.fields", log_level="INFO")
        logger.info("test message")
        parsed = json.loads(capsys.readouterr().out.strip())

        assert parsed["level"] == "INFO"
        assert parsed["module"] == "ptexamples.test.fields"
        assert parsed["msg"] == "test message"
        assert "ts" in parsed

    def test_extra_fields_are_included(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("ptexamples.test.extra", log_level="DEBUG")
        logger.info("End of epoch", extra={"epoch": 3, "lr": 0.04})
        parsed = json.loads(capsys.readouterr().out.strip())

        assert parsed["epoch"] == 3
        assert parsed["lr"] == 0.04

    def test_exception_is_recorded(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("ptexamples.test.exc", log_level="INFO")
        try:
            raise ValueError("bad batch")
        except ValueError:
            logger.error("Training failed", exc_info=True)
        parsed = json.loads(capsys.readouterr().out.strip())

        assert "ValueError: bad batch" in parsed["exc"]

    def test_repeated_calls_do_not_stack_handlers(self) -> None:
        first = get_logger("ptexamples.test.stack")
        second = get_logger("ptexamples.test.stack")
        assert first is second
        assert len(second.handlers) == 1


class TestLogLevelFiltering:
    def test_debug_messages_hidden_at_info_level(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        logger = get_logger("ptexamples.test.level_filter", log_level="INFO")
        logger.debug("this should not appear")
        assert capsys.readouterr().out.strip() == ""

    def test_set_log_level_relevels_existing_loggers(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        logger = get_logger("ptexamples.test.relevel", log_level="INFO")
        set_log_level("WARNING")

        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_invalid_level_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            get_logger("ptexamples.test.invalid", log_level="INVALID")

    def test_set_log_level_leaves_package_placeholders_alone(self) -> None:
        get_logger("ptexamples.test.parent_free.child", log_level="INFO")
        set_log_level("DEBUG")

        registry = logging.Logger.manager.loggerDict
        assert not isinstance(registry["ptexamples.test.parent_free"], logging.Logger)
        assert logging.getLogger("ptexamples.test.parent_free.child").level == logging.DEBUG


class TestFileOutput:
    def test_logs_are_written_to_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "run.log"
        logger = get_logger("ptexamples.test.file_output", log_level="INFO", log_file=log_file)
        logger.info("file log test")

        parsed = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert parsed["msg"] == "file log test"

