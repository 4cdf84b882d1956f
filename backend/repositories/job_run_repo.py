from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.job_run import JobHttpCall, JobRun
from .base import BaseRepository


class JobRunRepository(BaseRepository[JobRun]):
    """Repository for JobRun and JobHttpCall entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: str) -> Optional[JobRun]:
        return await super().get_by_id(JobRun, id)

    async def list_recent(self, limit: int = 50) -> List[JobRun]:
        """Most recent runs first."""
        stmt = (
            select(JobRun)
            .order_by(desc(JobRun.started_at_utc), desc(JobRun.id))
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_calls(self, run_id: str) -> List[JobHttpCall]:
        """HTTP calls for a run in call order."""
        stmt = (
            select(JobHttpCall)
            .where(JobHttpCall.run_id == run_id)
            .order_by(JobHttpCall.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_calls(self, run_id: str) -> int:
        stmt = select(func.count()).select_from(JobHttpCall).where(JobHttpCall.run_id == run_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def prune_oldest_calls(self, run_id: str, keep: int) -> int:
        """Delete the oldest calls of a run beyond `keep`; return how many were removed."""
        total = await self.count_calls(run_id)
        excess = total - keep
        if excess <= 0:
            return 0
        oldest = (
            select(JobHttpCall.id)
            .where(JobHttpCall.run_id == run_id)
            .order_by(JobHttpCall.id)
            .limit(excess)
        )
        ids = [row_id for (row_id,) in (await self.session.execute(oldest)).all()]
        await self.session.execute(delete(JobHttpCall).where(JobHttpCall.id.in_(ids)))
        return len(ids)
