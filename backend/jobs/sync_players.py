"""Attach provider player ids to existing squad players of mapped teams."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.database import get_database_manager
from core.errors import MissingTeamMapping
from feed.client import FeedClient
from feed.paths import league_path
from ingestion.normalize import slugify
from ingestion.tree import as_array, attr, child
from models.player import Player
from repositories.player_repo import PlayerRepository
from repositories.team_repo import TeamRepository

from .observability import JobContext
from .sync_teams import league_teams


def _squad(team: Dict[str, Any]) -> List[Dict[str, Any]]:
    data = child(team, "squad", "player")
    if data is None:
        data = team.get("player")
    return [p for p in as_array(data) if isinstance(p, dict)]


def match_player(candidates: List[Player], provider_id: str, name: str) -> Optional[Player]:
    """Within one team: provider id, then case-insensitive name, then slug."""
    for player in candidates:
        if player.provider_player_id == provider_id:
            return player
    lowered = name.lower()
    for player in candidates:
        if player.name.lower() == lowered:
            return player
    slug = slugify(name)
    for player in candidates:
        if player.slug == slug:
            return player
    return None


async def sync_players(ctx: JobContext, client: FeedClient, league_id: str) -> Dict[str, Any]:
    tree = await client.fetch(league_path(league_id), ctx)
    teams = league_teams(tree)

    total = matched = updated = 0
    unmatched: List[Dict[str, str]] = []
    async with get_database_manager().session() as session:
        team_ids = await TeamRepository(session).provider_id_map()
        by_team = await PlayerRepository(session).group_by_team()

        for team in teams:
            provider_team_id = attr(team, "id")
            if not provider_team_id:
                continue
            team_name = attr(team, "name") or ""
            internal_team_id = team_ids.get(provider_team_id)
            for node in _squad(team):
                provider_id, name = attr(node, "id"), attr(node, "name")
                if not provider_id or not name:
                    continue
                total += 1
                player = None
                if internal_team_id is not None:
                    player = match_player(by_team.get(internal_team_id, []), provider_id, name)
                if player is None:
                    unmatched.append(
                        {
                            "teamName": team_name,
                            "provider_team_id": provider_team_id,
                            "provider_player_id": provider_id,
                            "name": name,
                        }
                    )
                    continue
                matched += 1
                if player.provider_player_id != provider_id:
                    player.provider_player_id = provider_id
                    updated += 1
        await session.flush()

    return {
        "leagueId": league_id,
        "providerPlayers": total,
        "matched": matched,
        "updated": updated,
        "unmatchedSample": unmatched[: MissingTeamMapping.SAMPLE_LIMIT],
    }
