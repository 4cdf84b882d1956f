"""
Structured ops events for ingestion job milestones.
Log-level + structured event dict; URLs are always passed in redacted form.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List

OPS_LOGGER_NAME = "ops_events"


def _logger() -> logging.Logger:
    return logging.getLogger(OPS_LOGGER_NAME)


def _event(event_type: str, level: int = logging.INFO, **kwargs: Any) -> None:
    """Emit a structured ops event (sorted keys)."""
    msg = f"ops_event={event_type} " + " ".join(f"{k}={v!r}" for k, v in sorted(kwargs.items()))
    _logger().log(level, msg, extra={"ops_event_type": event_type, "ops_event": {**kwargs}})


def log_job_start(job_name: str, run_id: str) -> float:
    """Log job start; return start time for duration calculation."""
    _event("job_start", job_name=job_name, run_id=run_id)
    return time.perf_counter()


def log_job_end(
    job_name: str,
    run_id: str,
    status: str,
    duration_seconds: float,
    error: str | None = None,
) -> None:
    """Log job end with final status and duration."""
    payload: Dict[str, Any] = {
        "job_name": job_name,
        "run_id": run_id,
        "status": status,
        "duration_seconds": round(duration_seconds, 4),
    }
    if error:
        payload["error"] = error
    _event("job_end", level=logging.WARNING if status == "error" else logging.INFO, **payload)


def log_feed_fetch(
    url: str,
    status_code: int | None,
    duration_ms: int,
    bytes_in: int,
    error: str | None = None,
) -> None:
    """Log one provider call. url must already be redacted."""
    payload: Dict[str, Any] = {
        "url": url,
        "status_code": status_code,
        "duration_ms": duration_ms,
        "bytes_in": bytes_in,
    }
    if error:
        payload["error"] = error
    _event("feed_fetch", **payload)


def log_shape_matched(source: str, response_path: str, groups: int) -> None:
    """Log which response shape variant matched."""
    _event("shape_matched", source=source, response_path=response_path, groups=groups)


def log_standings_skipped(league_id: str, season: str, payload_hash: str) -> None:
    """Log an unchanged standings payload (no writes)."""
    _event("standings_skipped", league_id=league_id, season=season, payload_hash=payload_hash[:12])


def log_observability_failure(operation: str, detail: str) -> None:
    """Log a swallowed audit-write failure (never affects the job outcome)."""
    _event("observability_failure", level=logging.WARNING, operation=operation, detail=detail)


def log_missing_teams(league_id: str, season: str, missing: List[Dict[str, str]]) -> None:
    """Log a standings write refused for unmapped teams (bounded sample)."""
    _event(
        "missing_team_mapping",
        level=logging.WARNING,
        league_id=league_id,
        season=season,
        missing_count=len(missing),
        sample=[m.get("provider_team_id") for m in missing[:5]],
    )
