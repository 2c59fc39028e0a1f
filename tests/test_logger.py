"""Tests for logging setup."""

import json
import logging

from trend_bot.core.logger import JsonFormatter, setup_logging


def test_setup_logging_writes_file(tmp_path):
    logger = setup_logging("DEBUG", tmp_path, "bot.log")
    logging.getLogger("trend_bot.test").debug("hello %s", "file")
    for handler in logger.handlers:
        handler.flush()
    assert "hello file" in (tmp_path / "bot.log").read_text(encoding="utf-8")
    assert logger.level == logging.DEBUG
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_json_formatter():
    record = logging.LogRecord("trend_bot.x", logging.WARNING, __file__, 1, "limit %d", (4,), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "trend_bot.x"
    assert payload["message"] == "limit 4"
