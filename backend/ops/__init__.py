"""Operational structured events for ingestion jobs."""

from .ops_events import (
    log_feed_fetch,
    log_job_end,
    log_job_start,
    log_missing_teams,
    log_observability_failure,
    log_shape_matched,
    log_standings_skipped,
)

__all__ = [
    "log_feed_fetch",
    "log_job_end",
    "log_job_start",
    "log_missing_teams",
    "log_observability_failure",
    "log_shape_matched",
    "log_standings_skipped",
]
