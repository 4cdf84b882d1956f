"""
Snapshot differ for standings.

Hashes the incoming team rows and compares against the latest stored snapshot
for the same league/season. Unchanged payloads perform zero writes. Changed
(or forced) payloads are written as a new immutable snapshot plus rows, but
only when every provider team id maps to an internal team.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import MissingTeamMapping
from models.standings import StandingsRow, StandingsSnapshot
from ops.ops_events import log_missing_teams, log_standings_skipped
from repositories.standings_repo import StandingsRepository
from repositories.team_repo import TeamRepository

from .checksums import standings_payload_hash
from .normalize import parse_provider_timestamp, parse_standings_row
from .schema import ExtractedStandings, StandingsTeamRow

logger = logging.getLogger(__name__)


@dataclass
class StandingsWriteResult:
    snapshot_id: Optional[int]
    skipped: bool
    inserted_rows: int
    payload_hash: str
    as_of: datetime


def find_missing_teams(rows: List[StandingsTeamRow], team_map: Dict[str, str]) -> List[Dict[str, str]]:
    missing: List[Dict[str, str]] = []
    for row in rows:
        if not row.provider_team_id or row.provider_team_id not in team_map:
            missing.append({"provider_team_id": row.provider_team_id, "name": row.team_name or "Unknown"})
    return missing


async def apply_standings(
    session: AsyncSession,
    league_id: str,
    season: str,
    extracted: ExtractedStandings,
    *,
    force: bool = False,
    source_name: Optional[str] = None,
) -> StandingsWriteResult:
    """Write a new snapshot unless the payload is unchanged (and not forced).

    Raises MissingTeamMapping before any write when a team is unmapped.
    """
    repo = StandingsRepository(session)
    now = datetime.now(timezone.utc)
    as_of = parse_provider_timestamp(extracted.timestamp, fallback=now)
    payload_hash = standings_payload_hash(extracted.teams)

    latest = await repo.get_latest_snapshot(league_id, season)
    if latest is not None and latest.payload_hash == payload_hash and not force:
        log_standings_skipped(league_id, season, payload_hash)
        return StandingsWriteResult(latest.id, True, 0, payload_hash, as_of)

    rows = [parse_standings_row(node) for node in extracted.teams]
    team_map = await TeamRepository(session).map_provider_ids(r.provider_team_id for r in rows)
    missing = find_missing_teams(rows, team_map)
    if missing:
        log_missing_teams(league_id, season, missing)
        raise MissingTeamMapping(missing, league_id=league_id, season=season)

    snapshot = StandingsSnapshot(
        league_id=league_id,
        season=season,
        stage_id=extracted.stage_id,
        as_of_utc=as_of,
        captured_at_utc=now,
        source_name=source_name,
        payload_hash=payload_hash,
    )
    row_models = [
        StandingsRow(team_id=team_map[r.provider_team_id], **r.model_dump())
        for r in rows
    ]
    await repo.add_snapshot(snapshot, row_models)
    logger.info(
        "Standings snapshot %s written league_id=%s season=%s rows=%d",
        snapshot.id, league_id, season, len(row_models),
    )
    return StandingsWriteResult(snapshot.id, False, len(row_models), payload_hash, as_of)
