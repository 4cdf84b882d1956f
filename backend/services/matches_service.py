"""Matches-by-day read side, ordered by the priority engine."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models.match import Match
from ranking.priority import has_continental, sort_matches
from repositories.match_repo import MatchRepository

from .standings_service import as_utc

SORT_MODES = ("priority", "time")


def serialize_match(match: Match, priority: int) -> Dict[str, Any]:
    kickoff = as_utc(match.kickoff_utc)
    return {
        "id": match.id,
        "slug": match.slug,
        "competition": match.competition,
        "competitionId": match.competition_id,
        "providerCompetitionId": match.provider_competition_id,
        "seasonKey": match.season_key,
        "round": match.round,
        "status": match.status,
        "kickoffUtc": kickoff.isoformat() if kickoff else None,
        "venue": match.venue,
        "home": {
            "teamId": match.home_team_id,
            "providerTeamId": match.home_provider_team_id,
            "name": match.home_team_name,
            "score": match.home_score,
        },
        "away": {
            "teamId": match.away_team_id,
            "providerTeamId": match.away_provider_team_id,
            "name": match.away_team_name,
            "score": match.away_score,
        },
        "priority": priority,
    }


async def list_matches_for_day(
    session: AsyncSession,
    day: date,
    status: Optional[str] = None,
    sort: str = "priority",
) -> Dict[str, Any]:
    """All matches kicking off on `day` (UTC), sorted by priority or time."""
    if sort not in SORT_MODES:
        raise ValueError(f"sort must be one of {', '.join(SORT_MODES)}")
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    rows = await MatchRepository(session).find_by_kickoff_range(start, start + timedelta(days=1), status)

    ordered = sort_matches(
        rows,
        mode=sort,
        label_of=lambda m: m.competition or "",
        kickoff_of=lambda m: as_utc(m.kickoff_utc),
        id_of=lambda m: m.id,
    )
    matches: List[Dict[str, Any]] = [serialize_match(m, p) for m, p in ordered]
    return {
        "date": day.isoformat(),
        "status": status,
        "sort": sort,
        "europeanNights": has_continental(m.competition or "" for m in rows),
        "count": len(matches),
        "matches": matches,
    }
