"""Unit tests for structlog configuration."""

from __future__ import annotations

import json

import pytest
import structlog

from cribl_provider.observability.logging import LogLevel, configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_output(self):
        configure_logging(json_output=True, level="INFO")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        rendered = processors[-1](None, "info", {"event": "pipeline.created"})
        assert json.loads(rendered) == {"event": "pipeline.created"}

    def test_console_output(self):
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert isinstance(processors[1], structlog.processors.TimeStamper)

    def test_level_is_case_insensitive(self):
        configure_logging(level="debug")
        configure_logging(level=LogLevel.ERROR)

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="LOUD"):
            configure_logging(level="loud")
