"""
Tests for ops events: structured events are emitted (logger spy / captured logs).
"""

from __future__ import annotations

import logging

import pytest

from ops.ops_events import (
    OPS_LOGGER_NAME,
    log_feed_fetch,
    log_job_end,
    log_job_start,
    log_missing_teams,
    log_observability_failure,
    log_shape_matched,
    log_standings_skipped,
)


def test_ops_logger_name() -> None:
    """Ops events use a dedicated logger name."""
    assert OPS_LOGGER_NAME == "ops_events"


def test_log_job_start_returns_float_and_emits(caplog: pytest.LogCaptureFixture) -> None:
    """log_job_start emits event and returns start time (float)."""
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    t = log_job_start("matches", "run-1")
    assert isinstance(t, float)
    assert "job_start" in caplog.text
    assert "job_name" in caplog.text and "run_id" in caplog.text


def test_log_job_end_error_is_warning(caplog: pytest.LogCaptureFixture) -> None:
    """log_job_end emits duration; error runs are logged at WARNING."""
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    log_job_end("matches", "run-1", "success", 1.5)
    assert "job_end" in caplog.text
    assert "duration_seconds" in caplog.text
    log_job_end("matches", "run-2", "error", 0.0, error="Feed unavailable")
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.ops_event["error"] == "Feed unavailable"


def test_log_feed_fetch_carries_structured_payload(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    log_feed_fetch("http://feed.test/getfeed/***/soccernew/home", 200, 12, 345)
    record = caplog.records[-1]
    assert record.ops_event_type == "feed_fetch"
    assert record.ops_event["status_code"] == 200
    assert "error" not in record.ops_event


def test_shape_and_standings_events(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    log_shape_matched("fixtures", "results.tournament.week", 38)
    log_standings_skipped("1204", "2024/2025", "a" * 64)
    assert "results.tournament.week" in caplog.text
    assert caplog.records[-1].ops_event["payload_hash"] == "a" * 12


def test_failure_events_are_warnings(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    log_observability_failure("record_http_call", "OperationalError: locked")
    missing = [{"provider_team_id": str(i), "name": f"T{i}"} for i in range(8)]
    log_missing_teams("1204", "2024/2025", missing)
    assert [r.levelno for r in caplog.records[-2:]] == [logging.WARNING, logging.WARNING]
    event = caplog.records[-1].ops_event
    assert event["missing_count"] == 8
    assert event["sample"] == ["0", "1", "2", "3", "4"]
