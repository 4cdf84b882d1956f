"""Job trigger API: authenticated, idempotent, one endpoint per ingestion job."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_db_session, get_feed_client, require_job_secret
from core.errors import FeedConfigError, IngestError, MissingTeamMapping
from feed.client import FeedClient
from jobs.registry import run_named_job
from models.job_run import JobHttpCall, JobRun
from repositories.job_run_repo import JobRunRepository
from services.standings_service import iso_utc

router = APIRouter(prefix="/jobs", tags=["jobs"], dependencies=[Depends(require_job_secret)])


class BackfillRequest(BaseModel):
    league_ids: List[str] = Field(..., min_length=1, alias="leagueIds")
    seasons: List[str] = Field(..., min_length=1)
    force: bool = False

    model_config = {"populate_by_name": True}


def _http_error(exc: IngestError) -> HTTPException:
    """Feed problems -> 502, incomplete team mapping -> 409, missing feed key -> 500."""
    if isinstance(exc, FeedConfigError):
        status = 500
    elif isinstance(exc, MissingTeamMapping):
        status = 409
    else:
        status = 502
    return HTTPException(status_code=status, detail=exc.to_dict())


async def _trigger(name: str, client: FeedClient, **params: Any) -> Dict[str, Any]:
    try:
        return await run_named_job(name, client=client, **params)
    except IngestError as exc:
        raise _http_error(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/test-connection", summary="Probe the provider feed")
async def post_test_connection(client: FeedClient = Depends(get_feed_client)) -> dict:
    return await _trigger("test-connection", client)


@router.post("/competitions", summary="Sync competitions from the provider league list")
async def post_competitions(client: FeedClient = Depends(get_feed_client)) -> dict:
    return await _trigger("competitions", client)


@router.post("/teams", summary="Attach provider team ids for a league")
async def post_teams(
    league_id: str = Query(..., alias="leagueId"),
    client: FeedClient = Depends(get_feed_client),
) -> dict:
    return await _trigger("teams", client, league_id=league_id)


@router.post("/players", summary="Attach provider player ids for a league")
async def post_players(
    league_id: str = Query(..., alias="leagueId"),
    client: FeedClient = Depends(get_feed_client),
) -> dict:
    return await _trigger("players", client, league_id=league_id)


@router.post("/matches", summary="Sync fixtures for a league")
async def post_matches(
    league_id: str = Query(..., alias="leagueId"),
    season: Optional[str] = Query(None),
    force: bool = Query(False),
    client: FeedClient = Depends(get_feed_client),
) -> dict:
    return await _trigger("matches", client, league_id=league_id, season=season, force=force)


@router.post("/scores", summary="Ingest a daily/live scores feed")
async def post_scores(
    feed: str = Query("home"),
    client: FeedClient = Depends(get_feed_client),
) -> dict:
    return await _trigger("scores", client, feed=feed)


@router.post("/standings", summary="Sync standings for a league/season")
async def post_standings(
    league_id: str = Query(..., alias="leagueId"),
    season: Optional[str] = Query(None),
    force: bool = Query(False),
    client: FeedClient = Depends(get_feed_client),
) -> dict:
    return await _trigger("standings", client, league_id=league_id, season=season, force=force)


@router.post("/standings/backfill", summary="Backfill standings for leagues x seasons")
async def post_standings_backfill(
    body: BackfillRequest,
    client: FeedClient = Depends(get_feed_client),
) -> dict:
    return await _trigger(
        "standings-backfill", client, league_ids=body.league_ids, seasons=body.seasons, force=body.force
    )


def _run_dict(run: JobRun) -> Dict[str, Any]:
    return {
        "id": run.id,
        "jobName": run.job_name,
        "status": run.status,
        "startedAt": iso_utc(run.started_at_utc),
        "finishedAt": iso_utc(run.finished_at_utc),
        "meta": run.meta,
        "counters": run.counters,
        "stoppedReason": run.stopped_reason,
        "error": run.error,
    }


def _call_dict(call: JobHttpCall) -> Dict[str, Any]:
    return {
        "id": call.id,
        "provider": call.provider,
        "url": call.url,
        "method": call.method,
        "statusCode": call.status_code,
        "durationMs": call.duration_ms,
        "bytesIn": call.bytes_in,
        "error": call.error,
        "calledAt": iso_utc(call.called_at_utc),
    }


@router.get("/runs", summary="List recent job runs")
async def get_runs(
    limit: int = Query(50, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    runs = await JobRunRepository(session).list_recent(limit)
    return {"runs": [_run_dict(r) for r in runs]}


@router.get("/runs/{run_id}", summary="One job run with its HTTP calls")
async def get_run(
    run_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    repo = JobRunRepository(session)
    run = await repo.get_by_id(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"No job run with id={run_id}")
    calls = await repo.list_calls(run_id)
    return {"run": _run_dict(run), "httpCalls": [_call_dict(c) for c in calls]}
