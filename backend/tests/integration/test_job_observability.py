"""
Job observability: JobRun lifecycle, HTTP-call cap pruning, and best-effort
recording that never fails the ingestion it observes.
"""

from __future__ import annotations

import pytest

from core.errors import FeedUnavailable
from jobs.observability import JobContext, JobRecorder
from jobs.runner import final_status, run_job
from repositories.job_run_repo import JobRunRepository


async def _run(db, run_id):
    async with db.session() as session:
        repo = JobRunRepository(session)
        return await repo.get_by_id(run_id), await repo.list_calls(run_id)


def _call(i: int) -> dict:
    return {
        "provider": "goalserve",
        "url": f"http://feed.test/getfeed/***/soccernew/home?n={i}",
        "method": "GET",
        "status_code": 200,
        "duration_ms": 5,
        "bytes_in": 100,
    }


class BrokenManager:
    """DatabaseManager stand-in whose sessions always fail."""

    def session(self):
        raise RuntimeError("database is locked")


@pytest.mark.asyncio
async def test_successful_run_records_counters(db):
    recorder = JobRecorder(http_calls_cap=100)

    async def job(ctx: JobContext):
        await ctx.record_http_call(**_call(1))
        ctx.incr("widgets", 3)
        return {"inserted": 2, "label": "x"}

    summary = await run_job("matches", job, meta={"league_id": "1204"}, recorder=recorder)
    assert summary["ok"] is True
    assert summary["status"] == "success"
    run, calls = await _run(db, summary["runId"])
    assert run.status == "success"
    assert run.finished_at_utc is not None
    assert run.meta == {"league_id": "1204"}
    assert run.counters == {"inserted": 2, "widgets": 3, "http_calls": 1}
    assert len(calls) == 1
    assert "***" in calls[0].url


@pytest.mark.asyncio
async def test_skipped_records_make_run_partial(db):
    async def job(ctx: JobContext):
        ctx.incr("skippedNoStaticId")
        return {"inserted": 8}

    summary = await run_job("matches", job, recorder=JobRecorder(http_calls_cap=100))
    assert summary["status"] == "partial"
    run, _ = await _run(db, summary["runId"])
    assert run.status == "partial"
    assert final_status({"failCount": 0, "upsertConflicts": 0}) == "success"


@pytest.mark.asyncio
async def test_failed_run_records_error_and_reraises(db):
    recorder = JobRecorder(http_calls_cap=100)
    captured = {}

    async def job(ctx: JobContext):
        captured["run_id"] = ctx.run_id
        raise FeedUnavailable(503, "maintenance", "http://feed.test/getfeed/***/soccernew/home")

    with pytest.raises(FeedUnavailable):
        await run_job("scores", job, recorder=recorder)

    run, _ = await _run(db, captured["run_id"])
    assert run.status == "error"
    assert run.stopped_reason == "feed_unavailable"
    assert "HTTP 503" in run.error
    assert run.counters["error_detail"]["status_code"] == 503


@pytest.mark.asyncio
async def test_http_calls_beyond_cap_prune_oldest(db):
    recorder = JobRecorder(http_calls_cap=3)

    async def job(ctx: JobContext):
        for i in range(5):
            await ctx.record_http_call(**_call(i))
        return {}

    summary = await run_job("scores", job, recorder=recorder)
    assert summary["http_calls_dropped"] == 2
    run, calls = await _run(db, summary["runId"])
    assert [c.url.rsplit("=", 1)[1] for c in calls] == ["2", "3", "4"]
    assert run.counters["http_calls"] == 5
    assert run.counters["http_calls_dropped"] == 2


@pytest.mark.asyncio
async def test_recorder_failures_never_fail_the_job():
    recorder = JobRecorder(db=BrokenManager(), http_calls_cap=100)

    async def job(ctx: JobContext):
        await ctx.record_http_call(**_call(1))
        return {"inserted": 1}

    summary = await run_job("scores", job, recorder=recorder)
    assert summary["ok"] is True
    assert summary["runId"] is None
    assert summary["status"] == "success"
    assert summary["observability_failures"] >= 1


@pytest.mark.asyncio
async def test_record_http_call_without_run_is_noop(db):
    recorder = JobRecorder(http_calls_cap=100)
    assert await recorder.record_http_call(None, **_call(1)) == 0
    assert await recorder.finish_run(None, status="success") is False
