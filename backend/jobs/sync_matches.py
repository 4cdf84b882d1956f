"""Fixtures ingestion for one league: feed -> shapes -> normalizer -> upsert engine."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from core.database import get_database_manager
from core.errors import RecordSkipped, UpsertConflict
from feed.client import FeedClient
from feed.paths import fixtures_path
from ingestion.identity import TeamResolver
from ingestion.match_upsert import MatchUpsertEngine, UpsertOutcome
from ingestion.normalize import normalize_season_for_feed, season_key
from ingestion.records import SKIP_NO_KICKOFF, SKIP_NO_STATIC_ID, build_match
from ingestion.shapes import extract_fixtures
from ops.ops_events import log_shape_matched
from repositories.competition_repo import CompetitionRepository
from repositories.team_repo import TeamRepository

from .observability import JobContext

logger = logging.getLogger(__name__)


async def sync_matches(
    ctx: JobContext,
    client: FeedClient,
    league_id: str,
    season: Optional[str] = None,
    force: bool = False,
) -> Dict[str, Any]:
    """Upsert every fixture of a league.

    Season key resolution: explicit season, then the feed's season hint, then
    the competition's default. The CompetitionSeason becomes current when no
    season was requested, when none is current yet, or when forced.
    """
    feed_season = normalize_season_for_feed(season)
    if feed_season:
        tree = await client.fetch(fixtures_path(league_id), ctx, fmt="xml", params={"season": feed_season})
    else:
        tree = await client.fetch(fixtures_path(league_id), ctx)

    extracted = extract_fixtures(tree)
    log_shape_matched("fixtures", extracted.response_path, len(extracted.weeks))

    inserted = updated = total = 0
    async with get_database_manager().session() as session:
        competitions = CompetitionRepository(session)
        competition = await competitions.get_by_provider_id(league_id)

        key = season_key(season) or season_key(extracted.season_hint)
        if key is None and competition is not None:
            key = season_key(competition.season)

        if competition is not None and key:
            current = await competitions.get_current_season(competition.id)
            make_current = feed_season is None or current is None or force
            await competitions.upsert_season(competition.id, key, make_current)

        teams = TeamResolver(await TeamRepository(session).provider_id_map())
        engine = MatchUpsertEngine(session)

        for group in extracted.weeks:
            for record in group.matches:
                total += 1
                try:
                    match = build_match(
                        record,
                        group,
                        teams,
                        competition_name=extracted.competition_name,
                        provider_competition_id=league_id,
                        competition_id=competition.id if competition else None,
                        season_key=key,
                    )
                    outcome = await engine.upsert(match)
                except RecordSkipped as skip:
                    ctx.incr(skip.reason)
                    continue
                except UpsertConflict as conflict:
                    logger.warning("%s", conflict)
                    ctx.incr("upsertConflicts")
                    continue
                if outcome is UpsertOutcome.INSERTED:
                    inserted += 1
                else:
                    updated += 1

        if engine.recovered_conflicts:
            ctx.incr("recoveredConflicts", engine.recovered_conflicts)

    logger.info(
        "sync_matches league_id=%s path=%s total=%d inserted=%d updated=%d",
        league_id, extracted.response_path, total, inserted, updated,
    )
    return {
        "leagueId": league_id,
        "totalFromFeed": total,
        "inserted": inserted,
        "updated": updated,
        "skippedNoStaticId": ctx.counters.get(SKIP_NO_STATIC_ID, 0),
        "skippedNoKickoff": ctx.counters.get(SKIP_NO_KICKOFF, 0),
        "competitionId": competition.id if competition else None,
        "seasonKey": key,
        "responsePath": extracted.response_path,
    }
