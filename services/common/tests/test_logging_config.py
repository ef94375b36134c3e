"""
Unit tests for logging configuration.

Tests the text renderer, service context extraction and request ID handling.
"""

import json
import logging
from unittest.mock import MagicMock

import structlog

from services.common.logging_config import (
    EnhancedTextRenderer,
    add_request_context,
    add_service_context,
    get_logger,
    request_id_var,
    setup_service_logging,
)


class TestLoggingConfiguration:
    """Test the logging configuration features."""

    def setup_method(self):
        request_id_var.set("uninitialized")
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()

    def teardown_method(self):
        request_id_var.set("uninitialized")
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()

    def test_add_request_context(self):
        request_id_var.set("test-request-123")
        result = add_request_context(MagicMock(), "info", {"event": "test message"})
        assert result["request_id"] == "test-request-123"

    def test_add_request_context_no_context(self):
        result = add_request_context(MagicMock(), "info", {"event": "test message"})
        assert "request_id" not in result

    def test_add_service_context(self):
        event_dict = {"event": "test", "logger": "services.meetings.services.rrule"}
        result = add_service_context(MagicMock(), "info", event_dict)
        assert result["service"] == "meetings"

    def test_add_service_context_keeps_explicit_service(self):
        event_dict = {"logger": "services.meetings.x", "service": "worker"}
        assert add_service_context(MagicMock(), "info", event_dict)["service"] == "worker"

    def test_add_service_context_other_loggers(self):
        result = add_service_context(MagicMock(), "info", {"logger": "uvicorn.access"})
        assert "service" not in result

    def test_text_renderer(self):
        renderer = EnhancedTextRenderer("meetings")
        event_dict = {
            "timestamp": "2024-01-01T00:00:00Z",
            "level": "warning",
            "logger": "services.meetings.services.rrule",
            "event": "Dropping unmappable weekday codes from RRULE",
            "request_id": "abcdef123456",
            "weekly_days": "2,9",
        }
        result = renderer(MagicMock(), "warning", event_dict)

        assert result.startswith("2024-01-01T00:00:00Z [meetings] [WARNING] [3456]")
        assert "meetings.services.rrule - Dropping unmappable weekday codes" in result
        assert result.endswith("| weekly_days=2,9")

    def test_text_renderer_truncates_complex_values(self):
        renderer = EnhancedTextRenderer("meetings")
        result = renderer(MagicMock(), "info", {"event": "x", "payload": ["a" * 300]})
        payload = result.split("payload=", 1)[1]
        assert len(payload) == 150

    def test_setup_json_logging(self, capsys):
        setup_service_logging("meetings", log_level="DEBUG", log_format="json")
        request_id_var.set("req-42")

        get_logger("services.meetings.tests").info("hello", meeting_uid="m-1")

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        record = json.loads(lines[-1])
        assert record["event"] == "hello"
        assert record["meeting_uid"] == "m-1"
        assert record["service"] == "meetings"
        assert record["request_id"] == "req-42"
        assert record["level"] == "info"

    def test_setup_text_logging_respects_level(self, capsys):
        setup_service_logging("meetings", log_level="WARNING", log_format="text")

        logger = get_logger("services.meetings.tests")
        logger.info("quiet")
        logger.warning("loud")

        out = capsys.readouterr().out
        assert "quiet" not in out
        assert "[meetings] [WARNING]" in out
        assert "loud" in out
