"""
Tests for process-wide logging setup.
"""

from __future__ import annotations

import logging
import sys

import pytest

from config import settings
from core.logging_setup import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_level_defaults_to_settings(monkeypatch, restore_root_logger):
    monkeypatch.setattr(settings, "LOG_LEVEL", "DEBUG")
    setup_logging()
    assert restore_root_logger.level == logging.DEBUG


def test_explicit_level_overrides_settings(monkeypatch, restore_root_logger):
    monkeypatch.setattr(settings, "LOG_LEVEL", "DEBUG")
    setup_logging("ERROR")
    assert restore_root_logger.level == logging.ERROR


def test_single_stdout_handler_after_repeated_calls(restore_root_logger):
    setup_logging("INFO")
    setup_logging("INFO")
    handlers = restore_root_logger.handlers
    assert len(handlers) == 1
    assert handlers[0].stream is sys.stdout


def test_http_client_loggers_quieted(restore_root_logger):
    setup_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("google_genai").level == logging.WARNING
