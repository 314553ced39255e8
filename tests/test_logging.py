"""Tests for structured logging."""

from __future__ import annotations

import json
import logging
import sys

from habitloop.logging_config import JSONFormatter, get_logger, setup_logging


def _record(**kwargs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="habitloop.test",
        level=kwargs.pop("level", logging.INFO),
        pathname="test.py",
        lineno=42,
        msg=kwargs.pop("msg", "Habit created"),
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )
    record.module = "habits"
    record.funcName = "create"
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


def test_json_formatter_fields():
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "habitloop.test"
    assert log_data["message"] == "Habit created"
    assert log_data["module"] == "habits"
    assert log_data["function"] == "create"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_extra_fields():
    log_data = json.loads(JSONFormatter().format(_record(habit_id=7, user_id=3)))

    assert log_data["extra"] == {"habit_id": 7, "user_id": 3}


def test_json_formatter_with_exception():
    try:
        raise ValueError("repeat_count must be positive")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(_record(level=logging.ERROR, msg="Failed", exc_info=exc_info))
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "repeat_count" in log_data["exception"]["message"]
    assert "Traceback" in log_data["exception"]["traceback"]


def test_setup_logging_writes_json_file(config):
    logger = setup_logging(config)

    assert logger.name == "habitloop"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2

    get_logger("habits").warning("Reminder skipped", extra={"habit_id": 5})
    for handler in logger.handlers:
        handler.flush()

    log_file = config.DATA_DIR / "logs" / "habitloop.log"
    entries = [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[-1]["logger"] == "habitloop.habits"
    assert entries[-1]["extra"] == {"habit_id": 5}


def test_setup_logging_is_idempotent(config):
    setup_logging(config)
    logger = setup_logging(config)
    assert len(logger.handlers) == 2


def test_get_logger_namespace():
    assert get_logger("scheduler").name == "habitloop.scheduler"
