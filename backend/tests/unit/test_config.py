"""Settings from environment: defaults, clamps and list parsing."""

from __future__ import annotations

from core.config import Settings


def test_defaults_without_env(monkeypatch) -> None:
    for name in ("FEED_KEY", "JOB_SECRET", "SCHEDULER_ENABLED", "TRACKED_LEAGUE_IDS", "JOB_HTTP_CALLS_CAP"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.feed_key == ""
    assert s.job_secret == ""
    assert s.scheduler_enabled is False
    assert s.tracked_league_ids == ()
    assert s.job_http_calls_cap == 2000


def test_clamps_and_lists(monkeypatch) -> None:
    monkeypatch.setenv("JOB_HTTP_CALLS_CAP", "5")
    monkeypatch.setenv("TODAY_POLL_SECONDS", "1")
    monkeypatch.setenv("YESTERDAY_POLL_SECONDS", "bogus")
    monkeypatch.setenv("SCHEDULER_ENABLED", "yes")
    monkeypatch.setenv("TRACKED_LEAGUE_IDS", "1204, 1399,,")
    s = Settings.from_env()
    assert s.job_http_calls_cap == 100
    assert s.today_poll_seconds == 10
    assert s.yesterday_poll_seconds == 3600
    assert s.scheduler_enabled is True
    assert s.tracked_league_ids == ("1204", "1399")
