"""Standings read API (404 when nothing is stored for the key)."""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_db_session, get_feed_client
from feed.client import FeedClient
from ingestion.throttle import RefreshThrottle, get_refresh_throttle
from jobs.registry import run_named_job
from services.standings_service import get_standings, maybe_refresh

router = APIRouter(prefix="/standings", tags=["standings"])


@router.get(
    "",
    summary="Standings snapshot for a league/season",
    description="Most recent snapshot at or before asOf, rows joined to team metadata. "
    "Without season, the league's latest snapshot across seasons. "
    "autoRefresh triggers a throttled, best-effort standings sync first.",
)
async def read_standings(
    league_id: str = Query(..., alias="leagueId"),
    season: Optional[str] = Query(None),
    as_of: Optional[datetime] = Query(None, alias="asOf"),
    auto_refresh: bool = Query(False, alias="autoRefresh"),
    throttle: RefreshThrottle = Depends(get_refresh_throttle),
    client: FeedClient = Depends(get_feed_client),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    if auto_refresh:

        async def refresher(league: str, season_param: Optional[str]) -> Any:
            return await run_named_job("standings", client=client, league_id=league, season=season_param)

        # Runs before the read session issues its first query.
        await maybe_refresh(league_id, season, throttle, refresher)

    data = await get_standings(session, league_id, season, as_of)
    if data is None:
        raise HTTPException(status_code=404, detail=f"No standings for leagueId={league_id} season={season or ''}")
    return data
