from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Competition(Base):
    """Competition (league/cup) keyed by the provider's competition id."""

    __tablename__ = "competitions"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    provider_competition_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    season: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)


class CompetitionSeason(Base):
    """One competition's presence in one season; at most one row per competition is current."""

    __tablename__ = "competition_seasons"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    competition_id: Mapped[str] = mapped_column(
        ForeignKey("competitions.id"), nullable=False, index=True
    )
    season_key: Mapped[str] = mapped_column(String(32), nullable=False)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("competition_id", "season_key", name="uq_competition_season"),
    )
