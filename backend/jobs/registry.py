"""
Named ingestion jobs shared by the HTTP triggers, the CLI and the scheduler.

run_named_job wraps the job in run_job (JobRun bookkeeping) and owns the
FeedClient unless one is passed in.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Optional

from feed.client import FeedClient

from .backfill_standings import backfill_standings
from .connection_check import test_connection
from .ingest_scores import ingest_scores
from .observability import JobContext, JobRecorder
from .runner import run_job
from .sync_competitions import sync_competitions
from .sync_matches import sync_matches
from .sync_players import sync_players
from .sync_standings import sync_standings
from .sync_teams import sync_teams

JobImpl = Callable[..., Awaitable[Dict[str, Any]]]

# job name -> (implementation, accepted parameter names)
JOBS: Dict[str, tuple] = {
    "test-connection": (test_connection, ()),
    "competitions": (sync_competitions, ()),
    "teams": (sync_teams, ("league_id",)),
    "players": (sync_players, ("league_id",)),
    "matches": (sync_matches, ("league_id", "season", "force")),
    "scores": (ingest_scores, ("feed",)),
    "standings": (sync_standings, ("league_id", "season", "force")),
    "standings-backfill": (backfill_standings, ("league_ids", "seasons", "force")),
}

REQUIRED_PARAMS = {
    "teams": ("league_id",),
    "players": ("league_id",),
    "matches": ("league_id",),
    "standings": ("league_id",),
    "standings-backfill": ("league_ids", "seasons"),
}


def job_names() -> List[str]:
    return sorted(JOBS)


async def run_named_job(
    name: str,
    client: Optional[FeedClient] = None,
    recorder: Optional[JobRecorder] = None,
    **params: Any,
) -> Dict[str, Any]:
    """Run one job by name. Unknown names raise KeyError; missing parameters raise ValueError."""
    impl, accepted = JOBS[name]
    kwargs = {k: v for k, v in params.items() if k in accepted and v is not None}
    missing = [p for p in REQUIRED_PARAMS.get(name, ()) if not kwargs.get(p)]
    if missing:
        raise ValueError(f"job {name!r} requires: {', '.join(missing)}")

    meta = dict(kwargs)
    owned = client is None
    feed = client or FeedClient()

    async def job(ctx: JobContext) -> Dict[str, Any]:
        return await impl(ctx, feed, **kwargs)

    try:
        return await run_job(name, job, meta=meta, recorder=recorder)
    finally:
        if owned:
            await feed.aclose()
