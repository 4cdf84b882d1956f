"""Canonical SQLAlchemy models for the scoreline ingestion pipeline.

Match is the only mutable entity written by ingestion; standings snapshots and
their rows form an append-only history.
"""

from .base import Base
from .competition import Competition, CompetitionSeason
from .job_run import JobHttpCall, JobRun
from .match import Match
from .player import Player
from .standings import StandingsRow, StandingsSnapshot
from .team import Team

__all__ = [
    "Base",
    "Competition",
    "CompetitionSeason",
    "JobHttpCall",
    "JobRun",
    "Match",
    "Player",
    "StandingsRow",
    "StandingsSnapshot",
    "Team",
]
