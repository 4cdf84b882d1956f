"""Resource paths on the provider feed."""

from __future__ import annotations

SCORES_PREFIX = "soccernew/"
LEAGUE_LIST_PATH = "soccernew/league_list"
CONNECTION_TEST_PATH = "soccernew/home"

# home = today, d-1 = yesterday, d1 = tomorrow
KNOWN_SCORE_FEEDS = ("home", "d-1", "d1", "live")


def fixtures_path(league_id: str) -> str:
    return f"soccerfixtures/leagueid/{league_id}"


def standings_path(league_id: str) -> str:
    return f"standings/{league_id}.xml"


def league_path(league_id: str) -> str:
    """League squad/teams document."""
    return f"soccerleague/{league_id}"


def scores_path(feed: str) -> str:
    """Normalize "home", "/home" or "soccernew/home" to "soccernew/home" (never double-prefixed)."""
    path = str(feed or "").strip().lstrip("/")
    if not path:
        path = "home"
    if "/" not in path:
        path = SCORES_PREFIX + path
    while path.startswith(SCORES_PREFIX + SCORES_PREFIX):
        path = path[len(SCORES_PREFIX):]
    return path
