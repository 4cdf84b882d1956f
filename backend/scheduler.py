"""
Fixed-interval polling of the provider feed.

Today's scores on the short interval, yesterday's corrections and tracked
league fixtures on the long one. max_instances=1 keeps one process from
overlapping itself; overlap across processes is absorbed by the idempotent
upserts.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import Settings, get_settings
from core.errors import IngestError
from jobs.registry import run_named_job

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone="UTC")
_scheduler_started = False


async def poll_job(name: str, **params: Any) -> None:
    """Run one job; failures are already recorded on the JobRun, so only log them here."""
    try:
        summary = await run_named_job(name, **params)
    except IngestError as exc:
        logger.warning("Scheduled job %s failed: %s", name, exc)
        return
    logger.info(
        "Scheduled job %s finished status=%s inserted=%s updated=%s",
        name, summary.get("status"), summary.get("inserted"), summary.get("updated"),
    )


async def poll_tracked_fixtures(league_ids: tuple) -> None:
    for league_id in league_ids:
        await poll_job("matches", league_id=league_id)


def register_jobs(target: AsyncIOScheduler, settings: Settings) -> None:
    target.add_job(
        poll_job,
        trigger=IntervalTrigger(seconds=settings.today_poll_seconds),
        args=["scores"],
        kwargs={"feed": "home"},
        id="scores_today",
        name="Today's scores",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    target.add_job(
        poll_job,
        trigger=IntervalTrigger(seconds=settings.yesterday_poll_seconds),
        args=["scores"],
        kwargs={"feed": "d-1"},
        id="scores_yesterday",
        name="Yesterday's score corrections",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    if settings.tracked_league_ids:
        target.add_job(
            poll_tracked_fixtures,
            trigger=IntervalTrigger(seconds=settings.yesterday_poll_seconds),
            args=[settings.tracked_league_ids],
            id="tracked_fixtures",
            name="Tracked league fixtures",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )


def start_scheduler(settings: Optional[Settings] = None) -> bool:
    """Start polling when enabled; returns whether the scheduler is running."""
    global _scheduler_started

    settings = settings or get_settings()
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED is not set)")
        return False
    if _scheduler_started:
        logger.warning("Scheduler already started, skipping duplicate initialization")
        return True

    register_jobs(scheduler, settings)
    scheduler.start()
    _scheduler_started = True
    logger.info(
        "Scheduler started: today=%ss yesterday=%ss tracked_leagues=%d",
        settings.today_poll_seconds, settings.yesterday_poll_seconds, len(settings.tracked_league_ids),
    )
    return True


def stop_scheduler() -> None:
    """Stop the background scheduler."""
    global _scheduler_started
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
    _scheduler_started = False
