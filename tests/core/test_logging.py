"""Tests for structlog configuration."""

import logging

import structlog

from buildplan.core.logging import configure_structlog


class TestConfigureStructlog:
    def test_debug_level(self):
        configure_structlog(debug=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_default_level_is_warning(self):
        configure_structlog()
        assert logging.getLogger().level == logging.WARNING

    def test_json_renderer_by_default(self):
        configure_structlog(debug=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_in_debug(self):
        configure_structlog(debug=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_repeated_calls_are_safe(self):
        configure_structlog()
        configure_structlog()
        stream_handlers = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert len(stream_handlers) == 1
