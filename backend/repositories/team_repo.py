from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.team import Team
from .base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for Team entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: str) -> Optional[Team]:
        """Get team by ID."""
        return await super().get_by_id(Team, id)

    async def get_by_provider_id(self, provider_team_id: str) -> Optional[Team]:
        stmt = select(Team).where(Team.provider_team_id == provider_team_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Team]:
        """List every team ordered by name."""
        stmt = select(Team).order_by(Team.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def provider_id_map(self) -> Dict[str, str]:
        """Return provider_team_id -> internal id for all mapped teams."""
        stmt = select(Team.provider_team_id, Team.id).where(Team.provider_team_id.is_not(None))
        result = await self.session.execute(stmt)
        return {str(pid): tid for pid, tid in result.all()}

    async def map_provider_ids(self, provider_team_ids: Iterable[str]) -> Dict[str, str]:
        """Resolve only the given provider ids (uses the unique index)."""
        ids = sorted({p for p in provider_team_ids if p})
        if not ids:
            return {}
        stmt = select(Team.provider_team_id, Team.id).where(Team.provider_team_id.in_(ids))
        result = await self.session.execute(stmt)
        return {str(pid): tid for pid, tid in result.all()}
