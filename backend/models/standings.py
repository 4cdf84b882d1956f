from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class StandingsSnapshot(Base):
    """Immutable capture of one league/season table, keyed by provider league id + season."""

    __tablename__ = "standings_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    league_id: Mapped[str] = mapped_column(String(64), nullable=False)
    season: Mapped[str] = mapped_column(String(32), nullable=False)
    stage_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    as_of_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    captured_at_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    source_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payload_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        Index("ix_standings_snapshot_league_season", "league_id", "season", "captured_at_utc"),
    )


class StandingsRow(Base):
    """One team's row in a standings snapshot (immutable)."""

    __tablename__ = "standings_rows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    snapshot_id: Mapped[int] = mapped_column(
        ForeignKey("standings_snapshots.id"), nullable=False, index=True
    )
    team_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("teams.id"), nullable=True, index=True
    )
    provider_team_id: Mapped[str] = mapped_column(String(64), nullable=False)
    team_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    position: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    played: Mapped[int] = mapped_column(Integer, nullable=False)
    won: Mapped[int] = mapped_column(Integer, nullable=False)
    drawn: Mapped[int] = mapped_column(Integer, nullable=False)
    lost: Mapped[int] = mapped_column(Integer, nullable=False)
    goals_for: Mapped[int] = mapped_column(Integer, nullable=False)
    goals_against: Mapped[int] = mapped_column(Integer, nullable=False)
    goal_difference: Mapped[int] = mapped_column(Integer, nullable=False)

    recent_form: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    movement_status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    qualification_note: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    home_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    home_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    home_drawn: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    home_lost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    home_goals_for: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    home_goals_against: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_drawn: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_lost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_goals_for: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_goals_against: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
