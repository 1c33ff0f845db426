"""Unit tests for logging helpers."""

import json
import logging

import pytest

from screenspec.spec_logging import LOGGER_NAME, JsonFormatter, log_stage, setup_logging


class TestJsonFormatter:
    """Test cases for JsonFormatter."""

    def test_record_as_json(self):
        """Test that a record renders as one JSON object with extra fields merged."""
        record = logging.LogRecord("screenspec.test", logging.INFO, __file__, 10, "hello %s", ("画面",), None)
        record.extra_fields = {"stage": "parse"}

        entry = json.loads(JsonFormatter().format(record))

        assert entry["message"] == "hello 画面"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "screenspec.test"
        assert entry["stage"] == "parse"


class TestLogStage:
    """Test cases for log_stage."""

    def test_completed_stage_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            with log_stage("locate", source="a.md"):
                pass

        messages = [r.getMessage() for r in caplog.records]
        assert "Starting stage: locate" in messages
        assert any(m.startswith("Completed stage: locate") for m in messages)

    def test_failure_logged_and_reraised(self, caplog):
        """Test that an exception inside the stage is logged and propagated."""
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            with pytest.raises(KeyError):
                with log_stage("enrich"):
                    raise KeyError("x")

        failed = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(failed) == 1
        assert failed[0].extra_fields["status"] == "failed"
        assert failed[0].extra_fields["error_type"] == "KeyError"


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_file_handler_writes_json_lines(self, tmp_path):
        """Test that the optional log file receives JSON records."""
        log_file = tmp_path / "logs" / "run.jsonl"
        setup_logging("INFO", log_file)
        logger = logging.getLogger(f"{LOGGER_NAME}.test")

        logger.info("written")
        for h in logging.getLogger(LOGGER_NAME).handlers:
            h.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["message"] == "written"

        for h in list(logging.getLogger(LOGGER_NAME).handlers):
            h.close()
        logging.getLogger(LOGGER_NAME).handlers.clear()
