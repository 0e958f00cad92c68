"""Tests for listing_signals.core.logging."""

import io
import logging

import pytest

from listing_signals import config
from listing_signals.core import logging as ls_logging


@pytest.fixture
def package_logger(monkeypatch):
    logger = logging.getLogger(ls_logging.PACKAGE_LOGGER)
    monkeypatch.setattr(logger, "handlers", list(logger.handlers))
    monkeypatch.setattr(logger, "propagate", logger.propagate)
    original_level = logger.level
    yield logger
    logger.setLevel(original_level)


class TestResolveLevel:
    def test_explicit(self):
        assert ls_logging.resolve_level("debug") == logging.DEBUG

    def test_from_config(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "WARNING")
        assert ls_logging.resolve_level() == logging.WARNING

    def test_unknown_falls_back_to_info(self):
        assert ls_logging.resolve_level("chatty") == logging.INFO


class TestConfigureLogging:
    def test_silent_by_default(self):
        handlers = logging.getLogger(ls_logging.PACKAGE_LOGGER).handlers
        assert any(isinstance(h, logging.NullHandler) for h in handlers)

    def test_records_reach_stream(self, package_logger):
        stream = io.StringIO()
        ls_logging.configure_logging("DEBUG", stream=stream)
        logging.getLogger("listing_signals.engine").debug("batch of %d", 3)
        assert "listing_signals.engine: batch of 3" in stream.getvalue()

    def test_reconfigure_replaces_handler(self, package_logger):
        first, second = io.StringIO(), io.StringIO()
        ls_logging.configure_logging("INFO", stream=first)
        ls_logging.configure_logging("ERROR", stream=second)
        stream_handlers = [h for h in package_logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(stream_handlers) == 1
        assert package_logger.level == logging.ERROR

        logging.getLogger("listing_signals.engine").error("boom")
        assert first.getvalue() == ""
        assert "boom" in second.getvalue()

    def test_root_logger_untouched(self, package_logger):
        root = logging.getLogger()
        before = list(root.handlers)
        ls_logging.configure_logging("DEBUG", stream=io.StringIO())
        assert root.handlers == before

    def test_quietens_http_client(self, package_logger):
        ls_logging.configure_logging("DEBUG", stream=io.StringIO())
        assert logging.getLogger("httpx").level == logging.WARNING
