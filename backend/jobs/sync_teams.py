"""Attach provider team ids to existing teams (team onboarding is out of scope)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.database import get_database_manager
from core.errors import MissingTeamMapping, ShapeNotFound
from feed.client import FeedClient
from feed.paths import league_path
from ingestion.normalize import slugify
from ingestion.tree import as_array, attr, child, top_level_keys
from models.team import Team
from repositories.team_repo import TeamRepository

from .observability import JobContext


def abbreviations(name: str) -> List[str]:
    """Candidate short names: initials, first letters of words, first three letters."""
    words = name.split()
    out: List[str] = []
    if len(words) > 1:
        out.append("".join(w[:1] for w in words).upper())
        out.append("".join(w[:3] for w in words)[:3].upper())
    out.append("".join(words)[:3].upper())
    return out


def league_teams(tree: Any) -> List[Dict[str, Any]]:
    teams = [t for t in as_array(child(tree, "league", "team")) if isinstance(t, dict)]
    if not teams:
        raise ShapeNotFound(top_level_keys(tree), {"expected": "league.team"})
    return teams


class TeamMatcher:
    """Match provider teams by provider id, slug, lowercase name, then short-name abbreviation."""

    def __init__(self, teams: List[Team]) -> None:
        self.by_provider_id = {t.provider_team_id: t for t in teams if t.provider_team_id}
        self.by_slug = {t.slug: t for t in teams}
        self.by_name = {t.name.lower(): t for t in teams}
        self.by_short_name = {t.short_name.lower(): t for t in teams if t.short_name}

    def match(self, provider_id: str, name: str) -> Optional[Team]:
        found = self.by_provider_id.get(provider_id)
        if found is None:
            found = self.by_slug.get(slugify(name))
        if found is None:
            found = self.by_name.get(name.lower())
        if found is None:
            for abbrev in abbreviations(name):
                found = self.by_short_name.get(abbrev.lower())
                if found is not None:
                    break
        return found


async def sync_teams(ctx: JobContext, client: FeedClient, league_id: str) -> Dict[str, Any]:
    tree = await client.fetch(league_path(league_id), ctx)
    provider_teams = [
        (attr(t, "id"), attr(t, "name")) for t in league_teams(tree)
    ]
    provider_teams = [(pid, name) for pid, name in provider_teams if pid and name]

    matched = updated = 0
    unmatched: List[Dict[str, str]] = []
    async with get_database_manager().session() as session:
        matcher = TeamMatcher(await TeamRepository(session).list_all())
        for provider_id, name in provider_teams:
            team = matcher.match(provider_id, name)
            if team is None:
                unmatched.append({"provider_team_id": provider_id, "name": name})
                continue
            matched += 1
            if team.provider_team_id != provider_id:
                matcher.by_provider_id.pop(team.provider_team_id, None)
                team.provider_team_id = provider_id
                matcher.by_provider_id[provider_id] = team
                await session.flush()
                updated += 1

    return {
        "leagueId": league_id,
        "providerTeams": len(provider_teams),
        "matched": matched,
        "updated": updated,
        "unmatchedSample": unmatched[: MissingTeamMapping.SAMPLE_LIMIT],
    }
