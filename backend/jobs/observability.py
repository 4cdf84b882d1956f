"""
Job observability: record runs and outbound HTTP calls (redacted URLs).

Writes go through their own sessions, independent of the business
transaction, and are best-effort: any failure is logged as an ops event and
counted on the context, never raised into the ingestion path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.config import get_settings
from core.database import DatabaseManager, get_database_manager
from models.job_run import JobHttpCall, JobRun
from ops.ops_events import log_observability_failure
from repositories.job_run_repo import JobRunRepository

logger = logging.getLogger(__name__)

STATUS_RUNNING = "running"
STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_ERROR = "error"

ERROR_TEXT_LIMIT = 2000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRecorder:
    """Persists JobRun / JobHttpCall rows. Every public method swallows its own failures."""

    def __init__(
        self,
        db: Optional[DatabaseManager] = None,
        http_calls_cap: Optional[int] = None,
    ) -> None:
        self._db = db
        cap = http_calls_cap if http_calls_cap is not None else get_settings().job_http_calls_cap
        self.http_calls_cap = max(1, int(cap))

    def _manager(self) -> DatabaseManager:
        return self._db or get_database_manager()

    async def start_run(self, job_name: str, meta: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """Insert a running JobRun; returns its id or None when the write failed."""
        try:
            async with self._manager().session() as session:
                run = JobRun(job_name=job_name, status=STATUS_RUNNING, started_at_utc=_utcnow(), meta=meta or None)
                session.add(run)
                await session.flush()
                return run.id
        except Exception as exc:
            log_observability_failure("start_run", f"{type(exc).__name__}: {exc}")
            return None

    async def finish_run(
        self,
        run_id: Optional[str],
        *,
        status: str,
        counters: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        stopped_reason: Optional[str] = None,
    ) -> bool:
        if not run_id:
            return False
        try:
            async with self._manager().session() as session:
                run = await JobRunRepository(session).get_by_id(run_id)
                if run is None:
                    raise LookupError(f"job run {run_id} not found")
                run.status = status
                run.finished_at_utc = _utcnow()
                run.counters = counters or None
                run.error = error[:ERROR_TEXT_LIMIT] if error else None
                run.stopped_reason = stopped_reason
            return True
        except Exception as exc:
            log_observability_failure("finish_run", f"{type(exc).__name__}: {exc}")
            return False

    async def record_http_call(self, run_id: Optional[str], **payload: Any) -> int:
        """Append one call and prune the run's oldest calls beyond the cap.

        Returns how many calls were dropped; -1 when the write failed.
        """
        if not run_id:
            return 0
        try:
            async with self._manager().session() as session:
                session.add(
                    JobHttpCall(
                        run_id=run_id,
                        provider=payload.get("provider") or "unknown",
                        url=payload.get("url") or "",
                        method=payload.get("method") or "GET",
                        status_code=payload.get("status_code"),
                        duration_ms=payload.get("duration_ms"),
                        bytes_in=payload.get("bytes_in"),
                        error=payload.get("error"),
                        called_at_utc=_utcnow(),
                    )
                )
                await session.flush()
                return await JobRunRepository(session).prune_oldest_calls(run_id, self.http_calls_cap)
        except Exception as exc:
            log_observability_failure("record_http_call", f"{type(exc).__name__}: {exc}")
            return -1


@dataclass
class JobContext:
    """Explicit per-run context handed to every function that needs the run id."""

    job_name: str
    run_id: Optional[str]
    recorder: JobRecorder
    counters: Dict[str, int] = field(default_factory=dict)

    def incr(self, name: str, amount: int = 1) -> None:
        self.counters[name] = self.counters.get(name, 0) + amount

    async def record_http_call(
        self,
        *,
        provider: str,
        url: str,
        method: str,
        status_code: Optional[int],
        duration_ms: int,
        bytes_in: int,
        error: Optional[str] = None,
    ) -> None:
        """HttpCallSink implementation; result-ignoring, failures land in counters."""
        dropped = await self.recorder.record_http_call(
            self.run_id,
            provider=provider,
            url=url,
            method=method,
            status_code=status_code,
            duration_ms=duration_ms,
            bytes_in=bytes_in,
            error=error,
        )
        self.incr("http_calls")
        if dropped > 0:
            self.incr("http_calls_dropped", dropped)
        elif dropped < 0:
            self.incr("observability_failures")
