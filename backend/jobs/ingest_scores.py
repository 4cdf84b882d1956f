"""Daily/live scores ingestion (home, d-1, d1, live) through the shared upsert engine."""

from __future__ import annotations

import logging
from typing import Any, Dict

from core.database import get_database_manager
from core.errors import MissingTeamMapping, RecordSkipped, UpsertConflict
from feed.client import FeedClient
from feed.paths import scores_path
from ingestion.identity import CompetitionResolver, TeamResolver
from ingestion.match_upsert import MatchUpsertEngine, UpsertOutcome
from ingestion.normalize import season_key
from ingestion.records import SKIP_NO_KICKOFF, SKIP_NO_MATCH_ID, build_match
from ingestion.shapes import extract_fixtures
from ingestion.tree import attr
from ops.ops_events import log_shape_matched
from repositories.competition_repo import CompetitionRepository
from repositories.team_repo import TeamRepository

from .observability import JobContext

logger = logging.getLogger(__name__)


async def ingest_scores(ctx: JobContext, client: FeedClient, feed: str = "home") -> Dict[str, Any]:
    """Upsert every match in a scores feed.

    Identity falls back to the volatile id when a match has no static id.
    Matches referencing unmapped teams are still stored with provider ids.
    """
    path = scores_path(feed)
    tree = await client.fetch(path, ctx)
    extracted = extract_fixtures(tree)
    log_shape_matched("scores", extracted.response_path, len(extracted.weeks))

    inserted = updated = total = 0
    async with get_database_manager().session() as session:
        teams = TeamResolver(await TeamRepository(session).provider_id_map())
        competitions = CompetitionResolver(await CompetitionRepository(session).provider_id_map())
        engine = MatchUpsertEngine(session)

        for group in extracted.weeks:
            provider_competition_id = group.provider_competition_id
            for record in group.matches:
                total += 1
                try:
                    match = build_match(
                        record,
                        group,
                        teams,
                        competition_name=group.competition_name or extracted.competition_name,
                        provider_competition_id=provider_competition_id,
                        competition_id=competitions.resolve(provider_competition_id),
                        season_key=season_key(attr(record, "season")),
                        require_static_id=False,
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

    return {
        "feed": path,
        "totalFromFeed": total,
        "inserted": inserted,
        "updated": updated,
        "skippedNoMatchId": ctx.counters.get(SKIP_NO_MATCH_ID, 0),
        "skippedNoKickoff": ctx.counters.get(SKIP_NO_KICKOFF, 0),
        "unmappedTeams": len(teams.missing),
        "sampleMissingTeams": teams.missing_sample(MissingTeamMapping.SAMPLE_LIMIT),
        "responsePath": extracted.response_path,
    }
