from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.standings import StandingsRow, StandingsSnapshot
from models.team import Team
from .base import BaseRepository


class StandingsRepository(BaseRepository[StandingsSnapshot]):
    """Repository for StandingsSnapshot and StandingsRow entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_latest_snapshot(
        self, league_id: str, season: Optional[str]
    ) -> Optional[StandingsSnapshot]:
        """Most recently captured snapshot for a league/season (any season when None)."""
        stmt = select(StandingsSnapshot).where(StandingsSnapshot.league_id == league_id)
        if season is not None:
            stmt = stmt.where(StandingsSnapshot.season == season)
        stmt = stmt.order_by(desc(StandingsSnapshot.captured_at_utc), desc(StandingsSnapshot.id)).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_snapshot_as_of(
        self, league_id: str, season: Optional[str], as_of: datetime
    ) -> Optional[StandingsSnapshot]:
        """Most recent snapshot whose as_of is at or before the given instant (any season when None)."""
        stmt = (
            select(StandingsSnapshot)
            .where(StandingsSnapshot.league_id == league_id)
            .where(StandingsSnapshot.as_of_utc <= as_of)
        )
        if season is not None:
            stmt = stmt.where(StandingsSnapshot.season == season)
        stmt = stmt.order_by(desc(StandingsSnapshot.as_of_utc), desc(StandingsSnapshot.id)).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_snapshot(
        self, snapshot: StandingsSnapshot, rows: List[StandingsRow]
    ) -> StandingsSnapshot:
        """Add a snapshot and its rows (flushed, not committed)."""
        self.session.add(snapshot)
        await self.session.flush()
        for row in rows:
            row.snapshot_id = snapshot.id
        self.session.add_all(rows)
        await self.session.flush()
        return snapshot

    async def list_rows(
        self, snapshot_id: int
    ) -> List[StandingsRow]:
        """List all rows for a standings snapshot (ordered by position)."""
        stmt = (
            select(StandingsRow)
            .where(StandingsRow.snapshot_id == snapshot_id)
            .order_by(StandingsRow.position)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_rows_with_teams(
        self, snapshot_id: int
    ) -> List[Tuple[StandingsRow, Optional[Team]]]:
        """Rows joined to team display metadata (team may be None)."""
        stmt = (
            select(StandingsRow, Team)
            .outerjoin(Team, StandingsRow.team_id == Team.id)
            .where(StandingsRow.snapshot_id == snapshot_id)
            .order_by(StandingsRow.position)
        )
        result = await self.session.execute(stmt)
        return [(row, team) for row, team in result.all()]

    async def count_snapshots(self, league_id: str, season: str) -> int:
        stmt = (
            select(func.count())
            .select_from(StandingsSnapshot)
            .where(StandingsSnapshot.league_id == league_id)
            .where(StandingsSnapshot.season == season)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
