from __future__ import annotations

from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.player import Player
from .base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for Player entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def group_by_team(self) -> Dict[str, List[Player]]:
        """Return team_id -> players for every player attached to a team."""
        stmt = select(Player).where(Player.team_id.is_not(None)).order_by(Player.name)
        result = await self.session.execute(stmt)
        grouped: Dict[str, List[Player]] = {}
        for player in result.scalars().all():
            grouped.setdefault(player.team_id, []).append(player)
        return grouped
