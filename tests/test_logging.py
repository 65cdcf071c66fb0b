"""
Tests for structured logging helpers.
"""

import json
import logging

import pytest

from feedback_analyzer.shared.infrastructure.logging import (
    CustomJsonFormatter,
    current_correlation_id,
    get_context_logger,
    log_latency,
)


def _format(**extra) -> dict:
    formatter = CustomJsonFormatter("%(name)s %(levelname)s %(message)s")
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(formatter.format(record))


class TestCustomJsonFormatter:
    """JSON log records."""

    def test_adds_timestamp_and_environment(self):
        payload = _format()
        assert payload["message"] == "hello"
        assert payload["timestamp"]
        assert payload["environment"] == "unknown"

    def test_correlation_id_included(self):
        assert _format(correlation_id="abc")["correlation_id"] == "abc"

    def test_request_scoped_correlation_id_used_as_fallback(self):
        token = current_correlation_id.set("req-42")
        try:
            assert _format()["correlation_id"] == "req-42"
            assert _format(correlation_id="explicit")["correlation_id"] == "explicit"
        finally:
            current_correlation_id.reset(token)

    def test_no_correlation_id_outside_requests(self):
        assert "correlation_id" not in _format()

    def test_sensitive_fields_redacted(self):
        payload = _format(api_token="secret", openai_api_key="sk-123", records=3)

        assert payload["api_token"] == "***REDACTED***"
        assert payload["openai_api_key"] == "***REDACTED***"
        assert payload["records"] == 3


class TestLogHelpers:
    """Latency and context loggers."""

    def test_log_latency_emits_operation(self, caplog):
        logger = logging.getLogger("feedback_analyzer.test")

        with caplog.at_level(logging.INFO, logger="feedback_analyzer.test"):
            with log_latency(logger, "feedback_scan", records=2):
                pass

        record = caplog.records[-1]
        assert record.operation == "feedback_scan"
        assert record.outcome == "ok"
        assert record.getMessage() == "feedback_scan completed"
        assert record.records == 2
        assert record.latency_ms >= 0

    def test_log_latency_reports_failure(self, caplog):
        logger = logging.getLogger("feedback_analyzer.test")

        with caplog.at_level(logging.INFO, logger="feedback_analyzer.test"):
            with pytest.raises(RuntimeError):
                with log_latency(logger, "feedback_query_all"):
                    raise RuntimeError("connection refused")

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.getMessage() == "feedback_query_all failed"
        assert record.outcome == "error"
        assert record.error_type == "RuntimeError"
        assert not any(r.getMessage() == "feedback_query_all completed" for r in caplog.records)

    def test_context_logger_carries_correlation_id(self):
        logger = get_context_logger("feedback_analyzer.test", "abc-123")
        assert logger.extra == {"correlation_id": "abc-123"}
