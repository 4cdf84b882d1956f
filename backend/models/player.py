from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Player(Base):
    """Squad player; provider_player_id is attached by player sync."""

    __tablename__ = "players"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    team_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("teams.id"), nullable=True, index=True
    )
    provider_player_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )
