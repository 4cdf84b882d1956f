"""Provider payload builders shared by the ingestion tests (JSON dialect)."""

from __future__ import annotations

from typing import Any, Dict, Optional

FEED_KEY = "k3y-s3cret"
FEED_BASE_URL = "http://feed.test/getfeed/"


def fixture_match(
    static_id: Optional[str],
    volatile_id: Optional[str],
    *,
    date: str = "10.08.2024",
    time: str = "15:00",
    status: Optional[str] = None,
    home: tuple = ("101", "Arsenal", None),
    away: tuple = ("102", "Chelsea", None),
) -> Dict[str, Any]:
    """One provider match element in the JSON dialect."""
    match: Dict[str, Any] = {
        "@formatted_date": date,
        "@time": time,
        "@status": status or time,
        "localteam": {"@id": home[0], "@name": home[1]},
        "visitorteam": {"@id": away[0], "@name": away[1]},
    }
    if home[2] is not None:
        match["localteam"]["@score"] = home[2]
    if away[2] is not None:
        match["visitorteam"]["@score"] = away[2]
    if static_id is not None:
        match["@static_id"] = static_id
    if volatile_id is not None:
        match["@id"] = volatile_id
    return match


def fixtures_payload(matches, name: str = "Premier League", season: str = "2024/2025") -> Dict[str, Any]:
    return {
        "results": {
            "tournament": {
                "@league": name,
                "@season": season,
                "week": [{"@number": "1", "match": list(matches)}],
            }
        }
    }


def standings_payload(rows, season: str = "2024/2025", timestamp: str = "10.08.2024 18:30:00") -> Dict[str, Any]:
    return {
        "standings": {
            "@timestamp": timestamp,
            "tournament": {"@league": "Premier League", "@season": season, "@stage_id": "1", "team": list(rows)},
        }
    }


def standings_team(provider_id: str, name: str, position: int, points: int) -> Dict[str, Any]:
    return {
        "@id": provider_id,
        "@name": name,
        "@position": str(position),
        "@recent_form": "WWD",
        "@status": "same",
        "overall": {"@gp": "3", "@w": "2", "@d": "1", "@l": "0", "@gs": "6", "@ga": "2"},
        "home": {"@gp": "2", "@w": "1", "@d": "1", "@l": "0", "@gs": "3", "@ga": "1"},
        "away": {"@gp": "1", "@w": "1", "@d": "0", "@l": "0", "@gs": "3", "@ga": "1"},
        "total": {"@gd": "4", "@p": str(points)},
    }


async def seed_teams(db, teams) -> Dict[str, str]:
    """Insert (provider_id, name) teams; returns provider id -> internal id."""
    from models.team import Team
    from ingestion.normalize import slugify

    out: Dict[str, str] = {}
    async with db.session() as session:
        for provider_id, name in teams:
            team = Team(name=name, slug=slugify(name), provider_team_id=provider_id)
            session.add(team)
            await session.flush()
            out[provider_id] = team.id
    return out
