"""Scheduler wiring: intervals from settings, one instance per job, disabled by default."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from core.config import Settings
from scheduler import register_jobs, start_scheduler


def test_register_jobs_uses_settings_intervals():
    target = AsyncIOScheduler(timezone="UTC")
    settings = Settings(today_poll_seconds=30, yesterday_poll_seconds=600, tracked_league_ids=("1204",))
    register_jobs(target, settings)
    jobs = {job.id: job for job in target.get_jobs()}
    assert set(jobs) == {"scores_today", "scores_yesterday", "tracked_fixtures"}
    assert jobs["scores_today"].trigger.interval.total_seconds() == 30
    assert jobs["scores_yesterday"].kwargs == {"feed": "d-1"}
    assert jobs["tracked_fixtures"].args == (("1204",),)
    assert all(job.max_instances == 1 for job in jobs.values())


def test_no_tracked_leagues_no_fixture_poll():
    target = AsyncIOScheduler(timezone="UTC")
    register_jobs(target, Settings())
    assert {job.id for job in target.get_jobs()} == {"scores_today", "scores_yesterday"}


def test_start_scheduler_disabled_by_default():
    assert start_scheduler(Settings(scheduler_enabled=False)) is False
