"""Ingestion: shape extraction, field normalization, identity resolution and idempotent writes."""

from .match_upsert import MatchUpsertEngine, UpsertOutcome
from .schema import (
    ExtractedFixtures,
    ExtractedStandings,
    MatchKeys,
    MatchStatus,
    NormalizedMatch,
    StandingsTeamRow,
    WeekGroup,
)
from .shapes import extract_fixtures, extract_standings
from .standings_differ import apply_standings

__all__ = [
    "ExtractedFixtures",
    "ExtractedStandings",
    "MatchKeys",
    "MatchStatus",
    "MatchUpsertEngine",
    "NormalizedMatch",
    "StandingsTeamRow",
    "UpsertOutcome",
    "WeekGroup",
    "apply_standings",
    "extract_fixtures",
    "extract_standings",
]
