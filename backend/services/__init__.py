"""Services: read-side composition over repositories and the ranking engine."""

from .matches_service import list_matches_for_day
from .standings_service import get_standings, maybe_refresh

__all__ = [
    "get_standings",
    "list_matches_for_day",
    "maybe_refresh",
]
