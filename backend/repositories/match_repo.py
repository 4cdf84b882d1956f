from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.match import Match
from .base import BaseRepository


class MatchRepository(BaseRepository[Match]):
    """Repository for Match entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: str) -> Optional[Match]:
        """Get match by ID."""
        return await super().get_by_id(Match, id)

    async def get_by_static_id(self, static_id: str) -> Optional[Match]:
        stmt = select(Match).where(Match.provider_static_id == static_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Optional[Match]:
        stmt = select(Match).where(Match.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_volatile_id(
        self, volatile_id: str, static_id: Optional[str] = None
    ) -> Optional[Match]:
        """Fallback lookup by volatile id, most recently updated row first.

        A record without a static id (live scores) matches any row carrying the
        volatile id. A record with a static id only matches rows whose static id
        is unset or equal, so a reassigned volatile id never captures a
        different fixture.
        """
        stmt = select(Match).where(Match.provider_match_id == volatile_id)
        if static_id:
            stmt = stmt.where(
                or_(Match.provider_static_id.is_(None), Match.provider_static_id == static_id)
            )
        stmt = stmt.order_by(Match.updated_at_utc.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_kickoff_range(
        self,
        kickoff_from: datetime,
        kickoff_to: datetime,
        status: Optional[str] = None,
    ) -> List[Match]:
        """Find matches with kickoff in [from, to) (uses index)."""
        stmt = (
            select(Match)
            .where(Match.kickoff_utc >= kickoff_from)
            .where(Match.kickoff_utc < kickoff_to)
            .order_by(Match.kickoff_utc, Match.id)
        )
        if status:
            stmt = stmt.where(Match.status == status)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Match))
        return int(result.scalar_one())
