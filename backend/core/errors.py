"""
Ingestion error taxonomy.

Feed-level and mapping-completeness errors abort a run; record-level errors
(RecordSkipped) are caught by the job loop and counted. UpsertConflict never
leaves the upsert engine.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

BODY_SNIPPET_LIMIT = 300


class IngestError(Exception):
    """Base class for ingestion errors; to_dict() is the structured payload surfaced to callers."""

    kind: str = "ingest_error"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": str(self)}


class FeedConfigError(IngestError):
    """The feed key (or another required setting) is not configured."""

    kind = "feed_not_configured"


class FeedUnavailable(IngestError):
    """Provider answered with a non-200 status (or the request failed outright)."""

    kind = "feed_unavailable"

    def __init__(self, status_code: Optional[int], body_snippet: str = "", url: str = "") -> None:
        self.status_code = status_code
        self.body_snippet = (body_snippet or "")[:BODY_SNIPPET_LIMIT]
        self.url = url
        label = f"HTTP {status_code}" if status_code is not None else "no response"
        super().__init__(f"Feed unavailable ({label}) for {url}")

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out.update({"status_code": self.status_code, "body_snippet": self.body_snippet, "url": self.url})
        return out


class FeedMalformed(IngestError):
    """Body could not be parsed as the expected format."""

    kind = "feed_malformed"

    def __init__(self, reason: str, url: str = "") -> None:
        self.reason = reason
        self.url = url
        super().__init__(f"Feed malformed for {url}: {reason}")

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out.update({"reason": self.reason, "url": self.url})
        return out


class ShapeNotFound(IngestError):
    """No known response shape matched; carries the keys that were present."""

    kind = "shape_not_found"

    def __init__(self, top_level_keys: List[str], detail: Optional[Dict[str, Any]] = None) -> None:
        self.top_level_keys = list(top_level_keys)
        self.detail = dict(detail or {})
        super().__init__(
            "Could not find records in response. Top-level keys: [" + ", ".join(self.top_level_keys) + "]"
        )

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out.update({"top_level_keys": self.top_level_keys, "detail": self.detail})
        return out


class RecordSkipped(IngestError):
    """Per-record soft failure; reason is the counter name it lands in."""

    kind = "record_skipped"

    def __init__(self, reason: str, message: str = "") -> None:
        self.reason = reason
        super().__init__(message or reason)


class MissingTeamMapping(IngestError):
    """One or more provider team ids in a standings payload have no internal team."""

    kind = "missing_team_mapping"
    SAMPLE_LIMIT = 15

    def __init__(self, missing: List[Dict[str, str]], league_id: str = "", season: str = "") -> None:
        self.missing = list(missing)
        self.league_id = league_id
        self.season = season
        super().__init__(
            f"Missing teams - cannot ingest standings until all teams exist "
            f"(league_id={league_id} season={season} missing={len(self.missing)})"
        )

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out.update(
            {
                "league_id": self.league_id,
                "season": self.season,
                "missing_count": len(self.missing),
                "missing_teams": self.missing[: self.SAMPLE_LIMIT],
            }
        )
        return out


class UpsertConflict(IngestError):
    """Unique-constraint race that could not be resolved by re-selecting the row."""

    kind = "upsert_conflict"

    def __init__(self, natural_key: str) -> None:
        self.natural_key = natural_key
        super().__init__(f"Unresolved unique-constraint conflict for {natural_key}")
