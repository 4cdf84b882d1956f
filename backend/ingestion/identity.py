"""
Identity resolution for matches, teams and competitions.

A match's permanent identity is its static id; the volatile feed id is only a
fallback for rows ingested before static ids existed. Team and competition
ids resolve against pre-loaded provider-id maps and come back as None when
unmapped, so a match can still be stored with its provider ids.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .schema import MatchKeys
from .tree import attr

HOME_KEYS = ("localteam", "home", "home_team", "hometeam")
AWAY_KEYS = ("visitorteam", "away", "away_team", "awayteam")


def resolve_match_identity(record: Dict[str, Any]) -> MatchKeys:
    """Static id from @static_id, volatile id from @id (either may be None)."""
    return MatchKeys(static_id=attr(record, "static_id"), volatile_id=attr(record, "id"))


def team_node(record: Dict[str, Any], side: str) -> Dict[str, Any]:
    """The home/away team element of a match record ({} when absent)."""
    for key in HOME_KEYS if side == "home" else AWAY_KEYS:
        node = record.get(key)
        if isinstance(node, dict):
            return node
    return {}


def team_ref(node: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """(provider team id, display name) of a team element."""
    return attr(node, "id"), attr(node, "name")


@dataclass
class TeamResolver:
    """provider team id -> internal team id, recording misses for diagnostics."""

    by_provider_id: Dict[str, str]
    missing: Dict[str, str] = field(default_factory=dict)

    def resolve(self, provider_team_id: Optional[str], name: Optional[str] = None) -> Optional[str]:
        if not provider_team_id:
            return None
        team_id = self.by_provider_id.get(provider_team_id)
        if team_id is None and provider_team_id not in self.missing:
            self.missing[provider_team_id] = name or "Unknown"
        return team_id

    def missing_sample(self, limit: int = 15) -> List[Dict[str, str]]:
        return [
            {"provider_team_id": pid, "name": name}
            for pid, name in list(self.missing.items())[:limit]
        ]


@dataclass
class CompetitionResolver:
    """provider league id -> internal competition id (None when unmapped)."""

    by_provider_id: Dict[str, str]

    def resolve(self, provider_competition_id: Optional[str]) -> Optional[str]:
        if not provider_competition_id:
            return None
        return self.by_provider_id.get(provider_competition_id)
