from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.competition import Competition, CompetitionSeason
from .base import BaseRepository


class CompetitionRepository(BaseRepository[Competition]):
    """Repository for Competition and CompetitionSeason entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: str) -> Optional[Competition]:
        """Get competition by ID."""
        return await super().get_by_id(Competition, id)

    async def get_by_provider_id(self, provider_competition_id: str) -> Optional[Competition]:
        """Get competition by the provider's league id."""
        stmt = select(Competition).where(
            Competition.provider_competition_id == provider_competition_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Competition]:
        stmt = select(Competition).order_by(Competition.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_season(
        self, competition_id: str, season_key: str
    ) -> Optional[CompetitionSeason]:
        stmt = (
            select(CompetitionSeason)
            .where(CompetitionSeason.competition_id == competition_id)
            .where(CompetitionSeason.season_key == season_key)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_current_season(self, competition_id: str) -> Optional[CompetitionSeason]:
        """Return the season flagged current for a competition, if any."""
        stmt = (
            select(CompetitionSeason)
            .where(CompetitionSeason.competition_id == competition_id)
            .where(CompetitionSeason.is_current.is_(True))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_season(
        self, competition_id: str, season_key: str, make_current: bool
    ) -> CompetitionSeason:
        """Create or touch a CompetitionSeason row; optionally make it the only current one."""
        now = datetime.now(timezone.utc)
        row = await self.get_season(competition_id, season_key)
        if row is None:
            row = CompetitionSeason(
                competition_id=competition_id,
                season_key=season_key,
                is_current=False,
                updated_at_utc=now,
            )
            self.session.add(row)
            await self.session.flush()
        else:
            row.updated_at_utc = now

        if make_current:
            await self.session.execute(
                update(CompetitionSeason)
                .where(CompetitionSeason.competition_id == competition_id)
                .where(CompetitionSeason.id != row.id)
                .values(is_current=False)
            )
            row.is_current = True
        await self.session.flush()
        return row

    async def provider_id_map(self) -> Dict[str, str]:
        """Return provider_competition_id -> internal id for all mapped competitions."""
        stmt = select(Competition.provider_competition_id, Competition.id).where(
            Competition.provider_competition_id.is_not(None)
        )
        result = await self.session.execute(stmt)
        return {str(pid): cid for pid, cid in result.all()}
