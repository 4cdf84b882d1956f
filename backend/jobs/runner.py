"""
Job runner: start a JobRun, execute the job with an explicit JobContext, and
finalize it as success, partial (records skipped) or error.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from core.errors import IngestError
from ops.ops_events import log_job_end, log_job_start

from .observability import (
    STATUS_ERROR,
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    JobContext,
    JobRecorder,
)

logger = logging.getLogger(__name__)

JobFn = Callable[[JobContext], Awaitable[Dict[str, Any]]]

# Counters that, when non-zero, downgrade a run from success to partial.
PARTIAL_COUNTERS = (
    "skippedNoStaticId",
    "skippedNoMatchId",
    "skippedNoKickoff",
    "upsertConflicts",
    "failCount",
)


def _numeric_counters(summary: Dict[str, Any], ctx: JobContext) -> Dict[str, Any]:
    counters: Dict[str, Any] = {
        k: v for k, v in summary.items() if isinstance(v, int) and not isinstance(v, bool)
    }
    counters.update(ctx.counters)
    return counters


def final_status(counters: Dict[str, Any]) -> str:
    if any(int(counters.get(name) or 0) > 0 for name in PARTIAL_COUNTERS):
        return STATUS_PARTIAL
    return STATUS_SUCCESS


async def run_job(
    job_name: str,
    fn: JobFn,
    meta: Optional[Dict[str, Any]] = None,
    recorder: Optional[JobRecorder] = None,
) -> Dict[str, Any]:
    """Run `fn` under a JobRun. Run-level errors are recorded, then re-raised."""
    recorder = recorder or JobRecorder()
    run_id = await recorder.start_run(job_name, meta)
    ctx = JobContext(job_name=job_name, run_id=run_id, recorder=recorder)
    if run_id is None:
        ctx.incr("observability_failures")
    started = log_job_start(job_name, run_id or "")

    try:
        summary = await fn(ctx)
    except Exception as exc:
        counters = dict(ctx.counters)
        stopped_reason = type(exc).__name__
        if isinstance(exc, IngestError):
            counters["error_detail"] = exc.to_dict()
            stopped_reason = exc.kind
        await recorder.finish_run(
            run_id,
            status=STATUS_ERROR,
            counters=counters,
            error=str(exc),
            stopped_reason=stopped_reason,
        )
        log_job_end(job_name, run_id or "", STATUS_ERROR, time.perf_counter() - started, error=str(exc))
        raise

    counters = _numeric_counters(summary, ctx)
    status = final_status(counters)
    if not await recorder.finish_run(run_id, status=status, counters=counters):
        ctx.incr("observability_failures")
    log_job_end(job_name, run_id or "", status, time.perf_counter() - started)

    summary = dict(summary)
    summary["ok"] = True
    summary["runId"] = run_id
    summary["status"] = status
    for name in ("http_calls_dropped", "observability_failures"):
        if ctx.counters.get(name):
            summary[name] = ctx.counters[name]
    return summary
