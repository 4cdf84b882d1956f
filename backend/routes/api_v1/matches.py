"""Matches-by-day read API, ordered by competition priority or kickoff time."""

from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_db_session
from services.matches_service import SORT_MODES, list_matches_for_day

router = APIRouter(prefix="/matches", tags=["matches"])

VALID_STATUSES = ("scheduled", "live", "finished", "postponed")


@router.get("", summary="Matches kicking off on a UTC day")
async def read_matches(
    day: Optional[date] = Query(None, alias="date"),
    status: Optional[str] = Query(None),
    sort: str = Query("priority"),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    if sort not in SORT_MODES:
        raise HTTPException(status_code=400, detail=f"sort must be one of {', '.join(SORT_MODES)}")
    if status is not None and status not in VALID_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of {', '.join(VALID_STATUSES)}")
    target = day or datetime.now(timezone.utc).date()
    return await list_matches_for_day(session, target, status, sort)
