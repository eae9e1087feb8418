"""Tests for logging_config.py module."""

import logging

import pytest

from salesdesk_auth.logging_config import (
    ErrorAggregator,
    LoggerConfigurator,
    SecretRedactionFilter,
    error_aggregator,
    log_structured_error,
    redact_secrets,
)


class TestErrorAggregator:
    def test_records_and_summarizes(self):
        agg = ErrorAggregator()
        agg.record_error("network", "refused", {"path": "/sales"})
        agg.record_error("network", "timeout")
        agg.record_error("auth", "expired")

        summary = agg.get_error_summary()
        assert summary["network"]["total_count"] == 2
        assert summary["network"]["recent_count"] == 2
        assert summary["network"]["last_occurrence"]["message"] == "timeout"
        assert summary["auth"]["total_count"] == 1

    def test_keeps_only_recent_entries(self):
        agg = ErrorAggregator(max_per_type=3)
        for i in range(10):
            agg.record_error("server", f"e{i}")
        assert [e["message"] for e in agg.errors["server"]] == ["e7", "e8", "e9"]

    def test_reset(self):
        agg = ErrorAggregator()
        agg.record_error("auth", "x")
        agg.reset()
        assert agg.get_error_summary() == {}

    def test_summary_report(self, caplog):
        caplog.set_level(logging.INFO)
        agg = ErrorAggregator()
        agg.log_summary_report()
        assert "No auth client errors recorded" in caplog.text

        agg.record_error("auth", "expired")
        agg.log_summary_report()
        assert "AUTH CLIENT ERROR SUMMARY" in caplog.text
        assert "last=expired" in caplog.text


    def test_status_tally(self):
        agg = ErrorAggregator()
        agg.record_error("auth", "expired", {"status": 401})
        agg.record_error("auth", "expired", {"status": 401})
        agg.record_error("server", "boom", {"status": 503})
        agg.record_error("network", "refused", {"path": "/sales"})
        assert agg.status_counts() == {401: 2, 503: 1}


class TestSecretRedaction:
    def test_bearer_token_is_masked(self):
        assert redact_secrets("Authorization: Bearer eyJhbGci.abc-123") == "Authorization: Bearer ***"

    def test_payload_fields_are_masked(self):
        text = redact_secrets("body={'userName': 'jdoe', 'password': 'hunter2', 'accessToken': 'at-1'}")
        assert "hunter2" not in text
        assert "at-1" not in text
        assert "jdoe" in text

    def test_filter_rewrites_record(self):
        record = logging.LogRecord(
            name="t", level=logging.INFO, pathname="", lineno=0,
            msg="sending %s", args=("Bearer secret-token",), exc_info=None,
        )
        assert SecretRedactionFilter().filter(record) is True
        assert record.getMessage() == "sending Bearer ***"


def test_log_structured_error_formats_and_aggregates(caplog):
    log_structured_error(
        "network",
        "Request failed",
        exception=ConnectionError("refused"),
        context={"path": "/sales"},
        level=logging.WARNING,
    )
    assert "[NETWORK] Request failed | Exception: ConnectionError: refused | Context: path=/sales" in caplog.text
    assert caplog.records[-1].levelno == logging.WARNING
    assert error_aggregator.get_error_summary()["network"]["total_count"] == 1


class TestLoggerConfigurator:
    @pytest.mark.parametrize(
        "debug,env,expected",
        [
            (True, None, logging.DEBUG),
            (False, "true", logging.INFO),
            (None, "yes", logging.DEBUG),
            (None, "0", logging.INFO),
            (None, None, logging.INFO),
        ],
    )
    def test_resolve_level(self, monkeypatch, debug, env, expected):
        if env is None:
            monkeypatch.delenv("DEBUG", raising=False)
        else:
            monkeypatch.setenv("DEBUG", env)
        assert LoggerConfigurator(debug=debug)._resolve_level() == expected
