"""Tests for shared/logging.py - Logging setup."""

from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from fightpicks.config import LoggingSettings
from fightpicks.shared.logging import (
    DEFAULT_LOG_BACKUP_COUNT,
    ROOT_LOGGER_NAME,
    JsonFormatter,
    configure_logging,
)


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """configure_logging mutates the package logger; put it back for other tests."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def _record(msg, args=()) -> logging.LogRecord:
    return logging.LogRecord(
        name="fightpicks.events.resolver",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_dict_message_merged(self):
        """Dict payloads become top-level keys."""
        line = JsonFormatter().format(_record({"event_resolve": {"event_id": "600040001", "cache": "hit"}}))
        data = json.loads(line)
        assert data["level"] == "INFO"
        assert data["logger"] == "fightpicks.events.resolver"
        assert data["event_resolve"] == {"event_id": "600040001", "cache": "hit"}
        assert "ts" in data

    def test_plain_message(self):
        data = json.loads(JsonFormatter().format(_record("resolved %s", ("600040001",))))
        assert data["message"] == "resolved 600040001"

    def test_non_serializable_values(self):
        """Values json cannot encode are stringified."""
        data = json.loads(JsonFormatter().format(_record({"value": {1, 2}})))
        assert data["value"] in ("{1, 2}", "{2, 1}")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_installs_single_stream_handler(self):
        configure_logging(LoggingSettings())
        logger = configure_logging(LoggingSettings(level="debug"))

        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_plain_format(self):
        logger = configure_logging(LoggingSettings(json_logs=False))
        assert not isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_rotating_file(self, tmp_path):
        path = tmp_path / "fightpicks.log"
        logger = configure_logging(LoggingSettings(file=str(path), max_bytes=2048))

        handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(handlers) == 1
        assert handlers[0].backupCount == DEFAULT_LOG_BACKUP_COUNT
        assert handlers[0].maxBytes == 2048

        logging.getLogger("fightpicks.picks.service").info({"picks_saved": {"user_id": "u1"}})
        handlers[0].flush()
        line = path.read_text().strip().splitlines()[-1]
        assert json.loads(line)["picks_saved"] == {"user_id": "u1"}

    def test_quiets_driver_loggers(self):
        configure_logging(LoggingSettings(level="DEBUG"))
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
