"""Tests for focuszone/logging_config.py"""

import json
import logging

import structlog

from focuszone.logging_config import get_task_logger, setup_logging


class TestSetupLogging:
    def test_level_from_argument(self):
        setup_logging(level="warning", json_output=False)
        assert logging.getLogger().level == logging.WARNING

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("FOCUSZONE_LOG_LEVEL", "DEBUG")
        setup_logging(json_output=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_defaults_to_info(self):
        setup_logging(level="chatty", json_output=False)
        assert logging.getLogger().level == logging.INFO

    def test_json_output_carries_task_id(self, capsys):
        setup_logging(level="INFO", json_output=True)
        get_task_logger("focuszone.test", "task-123").info("Timer started")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "Timer started"
        assert event["level"] == "info"
        assert event["task_id"] == "task-123"

    def test_task_logger_leaves_context_untouched(self):
        get_task_logger("focuszone.test", "task-123")
        assert "task_id" not in structlog.contextvars.get_contextvars()
