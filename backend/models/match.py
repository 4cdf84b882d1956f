from __future__ import annotations

import uuid
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


class Match(Base):
    """One fixture. Identity is provider_static_id, falling back to provider_match_id."""

    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    slug: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    provider_static_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, unique=True
    )
    provider_match_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )

    provider_competition_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    competition_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("competitions.id"), nullable=True
    )
    competition: Mapped[str] = mapped_column(String(255), nullable=False)
    season_key: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    round: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    home_team_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("teams.id"), nullable=True
    )
    away_team_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("teams.id"), nullable=True
    )
    home_provider_team_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    away_provider_team_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    home_team_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    away_team_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(32), nullable=False)
    kickoff_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    venue: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    updated_at_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        Index("ix_match_kickoff", "kickoff_utc"),
        Index("ix_match_competition_kickoff", "competition_id", "kickoff_utc"),
    )
