"""Standings read side: latest snapshot at-or-before asOf, rows joined to team metadata."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import IngestError
from ingestion.normalize import season_key, season_to_display
from ingestion.throttle import RefreshThrottle
from models.standings import StandingsRow, StandingsSnapshot
from models.team import Team
from repositories.standings_repo import StandingsRepository

logger = logging.getLogger(__name__)

Refresher = Callable[[str, Optional[str]], Awaitable[Any]]


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_utc(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value else None


def _split(row: StandingsRow, side: str) -> Dict[str, int]:
    return {
        "played": getattr(row, f"{side}_played"),
        "won": getattr(row, f"{side}_won"),
        "drawn": getattr(row, f"{side}_drawn"),
        "lost": getattr(row, f"{side}_lost"),
        "goalsFor": getattr(row, f"{side}_goals_for"),
        "goalsAgainst": getattr(row, f"{side}_goals_against"),
    }


def serialize_row(row: StandingsRow, team: Optional[Team]) -> Dict[str, Any]:
    return {
        "position": row.position,
        "team": (
            {
                "id": team.id,
                "name": team.name,
                "slug": team.slug,
                "shortName": team.short_name,
                "logoUrl": team.logo_url,
            }
            if team is not None
            else None
        ),
        "providerTeamId": row.provider_team_id,
        "teamName": team.name if team is not None else row.team_name,
        "points": row.points,
        "played": row.played,
        "won": row.won,
        "drawn": row.drawn,
        "lost": row.lost,
        "goalsFor": row.goals_for,
        "goalsAgainst": row.goals_against,
        "goalDifference": row.goal_difference,
        "recentForm": row.recent_form,
        "movementStatus": row.movement_status,
        "qualificationNote": row.qualification_note,
        "home": _split(row, "home"),
        "away": _split(row, "away"),
    }


def serialize_snapshot(snapshot: StandingsSnapshot) -> Dict[str, Any]:
    return {
        "id": snapshot.id,
        "asOf": iso_utc(snapshot.as_of_utc),
        "capturedAt": iso_utc(snapshot.captured_at_utc),
        "stageId": snapshot.stage_id,
        "source": snapshot.source_name,
        "payloadHash": snapshot.payload_hash,
    }


async def maybe_refresh(
    league_id: str,
    season: Optional[str],
    throttle: RefreshThrottle,
    refresher: Refresher,
) -> bool:
    """Best-effort refresh, at most once per cooldown per (league, season).

    Feed and database problems are logged and never reach the reader.
    """
    if not throttle.try_acquire((league_id, season_key(season) or "")):
        return False
    try:
        await refresher(league_id, season)
    except (IngestError, SQLAlchemyError) as exc:
        logger.warning("Standings auto-refresh failed league_id=%s season=%s: %s", league_id, season, exc)
        return False
    return True


async def get_standings(
    session: AsyncSession,
    league_id: str,
    season: Optional[str],
    as_of: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    """Snapshot + rows, or None when nothing is stored for the key.

    Without a season the league's most recent snapshot across seasons is used.
    """
    key = season_key(season)
    repo = StandingsRepository(session)
    if as_of is None:
        snapshot = await repo.get_latest_snapshot(league_id, key)
    else:
        snapshot = await repo.get_snapshot_as_of(league_id, key, as_utc(as_of))
    if snapshot is None:
        return None

    rows = await repo.list_rows_with_teams(snapshot.id)
    return {
        "leagueId": league_id,
        "season": snapshot.season,
        "seasonDisplay": season_to_display(snapshot.season),
        "snapshot": serialize_snapshot(snapshot),
        "rows": [serialize_row(row, team) for row, team in rows],
    }
