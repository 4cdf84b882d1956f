"""
Typed intermediate records produced by the shape extractor and normalizer.

Downstream code (upsert engine, snapshot differ) only ever sees these types,
never the raw provider tree.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    FINISHED = "finished"
    POSTPONED = "postponed"


class WeekGroup(BaseModel):
    """One "week of matches": the uniform unit every fixture shape is reduced to."""

    label: Optional[str] = Field(None, description="Week/stage number or name, if any")
    formatted_date: Optional[str] = Field(None, description="Group-level DD.MM.YYYY date")
    competition_name: Optional[str] = Field(None, description="Per-group competition (scores feeds)")
    provider_competition_id: Optional[str] = Field(None, description="Per-group provider league id")
    matches: List[Dict[str, Any]] = Field(default_factory=list)


class ExtractedFixtures(BaseModel):
    """Result of a successful fixture/score shape match."""

    competition_name: str = "Unknown"
    season_hint: Optional[str] = None
    weeks: List[WeekGroup] = Field(default_factory=list)
    response_path: str

    @property
    def match_count(self) -> int:
        return sum(len(w.matches) for w in self.weeks)


class ExtractedStandings(BaseModel):
    """Result of a successful standings shape match."""

    timestamp: Optional[str] = None
    season: Optional[str] = None
    stage_id: Optional[str] = None
    league_name: Optional[str] = None
    teams: List[Dict[str, Any]] = Field(default_factory=list)
    response_path: str


class MatchKeys(BaseModel):
    """Identity of a match: permanent static id plus volatile feed id."""

    static_id: Optional[str] = None
    volatile_id: Optional[str] = None

    @property
    def slug(self) -> Optional[str]:
        if self.static_id:
            return f"static-{self.static_id}"
        if self.volatile_id:
            return f"feed-{self.volatile_id}"
        return None


class NormalizedMatch(BaseModel):
    """One fixture in canonical types, ready for the upsert engine."""

    keys: MatchKeys
    provider_competition_id: Optional[str] = None
    competition_id: Optional[str] = None
    competition_name: str = "Unknown"
    season_key: Optional[str] = None
    round: Optional[str] = None
    home_provider_team_id: Optional[str] = None
    away_provider_team_id: Optional[str] = None
    home_team_name: Optional[str] = None
    away_team_name: Optional[str] = None
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None
    home_score: Optional[int] = Field(None, ge=0)
    away_score: Optional[int] = Field(None, ge=0)
    status: MatchStatus = MatchStatus.SCHEDULED
    kickoff_utc: datetime
    venue: Optional[str] = None

    @property
    def natural_key(self) -> str:
        return self.keys.slug or "unknown"


class StandingsTeamRow(BaseModel):
    """One parsed standings row (all counters default to 0)."""

    provider_team_id: str
    team_name: Optional[str] = None
    position: int = 0
    points: int = 0
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    recent_form: Optional[str] = None
    movement_status: Optional[str] = None
    qualification_note: Optional[str] = None
    home_played: int = 0
    home_won: int = 0
    home_drawn: int = 0
    home_lost: int = 0
    home_goals_for: int = 0
    home_goals_against: int = 0
    away_played: int = 0
    away_won: int = 0
    away_drawn: int = 0
    away_lost: int = 0
    away_goals_for: int = 0
    away_goals_against: int = 0
