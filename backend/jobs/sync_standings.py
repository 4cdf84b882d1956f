"""Standings ingestion for one league/season through the snapshot differ."""

from __future__ import annotations

from typing import Any, Dict, Optional

from core.database import get_database_manager
from feed.client import FeedClient
from feed.paths import standings_path
from ingestion.normalize import normalize_season_for_feed, season_key
from ingestion.shapes import extract_standings
from ingestion.standings_differ import apply_standings
from ops.ops_events import log_shape_matched

from .observability import JobContext


async def sync_standings(
    ctx: JobContext,
    client: FeedClient,
    league_id: str,
    season: Optional[str] = None,
    force: bool = False,
) -> Dict[str, Any]:
    feed_season = normalize_season_for_feed(season)
    params = {"season": feed_season} if feed_season else None
    tree = await client.fetch(standings_path(league_id), ctx, params=params)
    extracted = extract_standings(tree)
    log_shape_matched("standings", extracted.response_path, len(extracted.teams))

    key = season_key(extracted.season) or season_key(season) or ""
    async with get_database_manager().session() as session:
        result = await apply_standings(
            session, league_id, key, extracted, force=force, source_name=client.provider
        )

    if result.skipped:
        ctx.incr("standingsUnchanged")
    return {
        "leagueId": league_id,
        "season": key,
        "asOf": result.as_of.isoformat(),
        "snapshotId": result.snapshot_id,
        "skipped": result.skipped,
        "insertedRowsCount": result.inserted_rows,
    }
