"""Standings backfill: one standings sync per (league, season), never aborting the batch."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy.exc import SQLAlchemyError

from core.errors import IngestError
from feed.client import FeedClient

from .observability import JobContext
from .sync_standings import sync_standings

logger = logging.getLogger(__name__)


async def backfill_standings(
    ctx: JobContext,
    client: FeedClient,
    league_ids: Sequence[str],
    seasons: Sequence[str],
    force: bool = False,
) -> Dict[str, Any]:
    results: List[Dict[str, Any]] = []
    ok_count = fail_count = skipped_count = 0

    for league_id in league_ids:
        for season in seasons:
            try:
                outcome = await sync_standings(ctx, client, league_id, season, force=force)
            except IngestError as exc:
                fail_count += 1
                logger.warning("Backfill failed league_id=%s season=%s: %s", league_id, season, exc)
                results.append({"leagueId": league_id, "season": season, "ok": False, "error": exc.to_dict()})
                continue
            except SQLAlchemyError as exc:
                fail_count += 1
                logger.exception("Backfill DB error league_id=%s season=%s", league_id, season)
                results.append(
                    {"leagueId": league_id, "season": season, "ok": False,
                     "error": {"kind": "database_error", "message": str(exc)}}
                )
                continue
            ok_count += 1
            if outcome["skipped"]:
                skipped_count += 1
            results.append({**outcome, "ok": True})

    return {
        "total": len(results),
        "okCount": ok_count,
        "failCount": fail_count,
        "skippedCount": skipped_count,
        "results": results,
    }
