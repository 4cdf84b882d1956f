"""Repository layer for DB access only (CRUD + simple queries).

Repositories accept an AsyncSession explicitly and never commit; the job or
service that opened the session owns the transaction.
"""

from .base import BaseRepository
from .competition_repo import CompetitionRepository
from .job_run_repo import JobRunRepository
from .match_repo import MatchRepository
from .player_repo import PlayerRepository
from .standings_repo import StandingsRepository
from .team_repo import TeamRepository

__all__ = [
    "BaseRepository",
    "CompetitionRepository",
    "JobRunRepository",
    "MatchRepository",
    "PlayerRepository",
    "StandingsRepository",
    "TeamRepository",
]
