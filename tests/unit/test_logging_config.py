"""Tests for logging setup."""

import logging

import pytest
from pythonjsonlogger import jsonlogger

from logging_config import LoggingConfig


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
def test_json_format(monkeypatch, restore_root_logger):
    monkeypatch.setattr(LoggingConfig, "LOG_FORMAT", "json")
    monkeypatch.setattr(LoggingConfig, "LOG_LEVEL", "DEBUG")

    LoggingConfig.setup_logging()

    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("pymongo").level == logging.WARNING


@pytest.mark.unit
def test_text_format_and_unknown_level(monkeypatch, restore_root_logger):
    monkeypatch.setattr(LoggingConfig, "LOG_FORMAT", "text")
    monkeypatch.setattr(LoggingConfig, "LOG_LEVEL", "LOUD")

    LoggingConfig.setup_logging()

    formatter = restore_root_logger.handlers[0].formatter
    assert not isinstance(formatter, jsonlogger.JsonFormatter)
    assert restore_root_logger.level == logging.INFO
