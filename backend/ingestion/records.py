"""Assemble NormalizedMatch records from raw match elements."""

from __future__ import annotations

from typing import Any, Dict, Optional

from core.errors import RecordSkipped

from .identity import TeamResolver, resolve_match_identity, team_node, team_ref
from .normalize import (
    extract_round,
    extract_score,
    looks_like_time,
    normalize_status,
    parse_kickoff,
)
from .schema import NormalizedMatch, WeekGroup
from .tree import attr, first_attr

SKIP_NO_STATIC_ID = "skippedNoStaticId"
SKIP_NO_MATCH_ID = "skippedNoMatchId"
SKIP_NO_KICKOFF = "skippedNoKickoff"


def _kickoff_time(record: Dict[str, Any]) -> Optional[str]:
    for name in ("time", "status"):
        value = attr(record, name)
        if looks_like_time(value):
            return value
    return None


def _kickoff(record: Dict[str, Any], group: WeekGroup):
    time_str = _kickoff_time(record)
    for date_str in (
        attr(record, "formatted_date"),
        attr(record, "date"),
        group.formatted_date,
    ):
        kickoff = parse_kickoff(date_str, time_str)
        if kickoff is not None:
            return kickoff
    return None


def build_match(
    record: Dict[str, Any],
    group: WeekGroup,
    teams: TeamResolver,
    *,
    competition_name: str,
    provider_competition_id: Optional[str] = None,
    competition_id: Optional[str] = None,
    season_key: Optional[str] = None,
    require_static_id: bool = True,
) -> NormalizedMatch:
    """Normalize one raw match; raises RecordSkipped with the counter name as reason."""
    keys = resolve_match_identity(record)
    if require_static_id and not keys.static_id:
        raise RecordSkipped(SKIP_NO_STATIC_ID, "match has no static id")
    if not keys.static_id and not keys.volatile_id:
        raise RecordSkipped(SKIP_NO_MATCH_ID, "match has neither static nor feed id")

    kickoff = _kickoff(record, group)
    if kickoff is None:
        raise RecordSkipped(SKIP_NO_KICKOFF, f"unparsable kickoff for {keys.slug}")

    home = team_node(record, "home")
    away = team_node(record, "away")
    home_pid, home_name = team_ref(home)
    away_pid, away_name = team_ref(away)

    raw_status = first_attr(record, "status") or _kickoff_time(record)

    return NormalizedMatch(
        keys=keys,
        provider_competition_id=provider_competition_id,
        competition_id=competition_id,
        competition_name=competition_name,
        season_key=season_key,
        round=extract_round(record, group.label),
        home_provider_team_id=home_pid,
        away_provider_team_id=away_pid,
        home_team_name=home_name,
        away_team_name=away_name,
        home_team_id=teams.resolve(home_pid, home_name),
        away_team_id=teams.resolve(away_pid, away_name),
        home_score=extract_score(record, home, "home"),
        away_score=extract_score(record, away, "away"),
        status=normalize_status(raw_status),
        kickoff_utc=kickoff,
        venue=first_attr(record, "venue", "venue_name"),
    )
