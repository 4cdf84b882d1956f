"""
Match upsert engine: static-id identity, volatile-id fallback, sticky scores,
and recovery from unique-constraint races.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.database import get_database_manager
from core.errors import UpsertConflict
from ingestion.match_upsert import MatchUpsertEngine, UpsertOutcome
from ingestion.schema import MatchKeys, MatchStatus, NormalizedMatch
from repositories.match_repo import MatchRepository

KICKOFF = datetime(2024, 8, 10, 15, 0, tzinfo=timezone.utc)


def _record(static_id=None, volatile_id=None, home_score=None, away_score=None, status=MatchStatus.SCHEDULED, **extra):
    return NormalizedMatch(
        keys=MatchKeys(static_id=static_id, volatile_id=volatile_id),
        competition_name="England: Premier League",
        home_team_name="Arsenal",
        away_team_name="Chelsea",
        home_score=home_score,
        away_score=away_score,
        status=status,
        kickoff_utc=KICKOFF,
        **extra,
    )


async def _upsert(record: NormalizedMatch) -> UpsertOutcome:
    async with get_database_manager().session() as session:
        return await MatchUpsertEngine(session).upsert(record)


async def _load_static(static_id: str):
    async with get_database_manager().session() as session:
        return await MatchRepository(session).get_by_static_id(static_id)


@pytest.mark.asyncio
async def test_insert_then_update_is_idempotent(db):
    assert await _upsert(_record("1", "11")) is UpsertOutcome.INSERTED
    assert await _upsert(_record("1", "11")) is UpsertOutcome.UPDATED
    async with db.session() as session:
        assert await MatchRepository(session).count() == 1
    row = await _load_static("1")
    assert row.slug == "static-1"
    assert row.provider_match_id == "11"


@pytest.mark.asyncio
async def test_scores_are_sticky(db):
    await _upsert(_record("1", "11", home_score=2, away_score=1, status=MatchStatus.FINISHED))
    # A later feed that omits the score must not blank it.
    await _upsert(_record("1", "11", status=MatchStatus.FINISHED, venue="Emirates Stadium"))
    row = await _load_static("1")
    assert (row.home_score, row.away_score) == (2, 1)
    assert row.venue == "Emirates Stadium"


@pytest.mark.asyncio
async def test_scores_update_when_present(db):
    await _upsert(_record("1", "11", home_score=0, away_score=0, status=MatchStatus.LIVE))
    await _upsert(_record("1", "11", home_score=1, away_score=0, status=MatchStatus.LIVE))
    row = await _load_static("1")
    assert (row.home_score, row.away_score) == (1, 0)


@pytest.mark.asyncio
async def test_volatile_id_churn_updates_same_row(db):
    await _upsert(_record("1", "11"))
    assert await _upsert(_record("1", "999")) is UpsertOutcome.UPDATED
    row = await _load_static("1")
    assert row.provider_match_id == "999"
    assert row.slug == "static-1"


@pytest.mark.asyncio
async def test_volatile_fallback_adopts_static_id_without_rewriting_slug(db):
    assert await _upsert(_record(None, "11")) is UpsertOutcome.INSERTED
    assert await _upsert(_record("5", "11")) is UpsertOutcome.UPDATED
    row = await _load_static("5")
    assert row is not None
    assert row.slug == "feed-11"
    async with db.session() as session:
        assert await MatchRepository(session).count() == 1


@pytest.mark.asyncio
async def test_reused_volatile_id_never_captures_another_fixture(db):
    await _upsert(_record("7", "11"))
    assert await _upsert(_record("8", "11")) is UpsertOutcome.INSERTED
    first, second = await _load_static("7"), await _load_static("8")
    assert first.id != second.id


@pytest.mark.asyncio
async def test_live_record_without_static_id_updates_fixture_row(db):
    await _upsert(_record("1", "11"))
    outcome = await _upsert(_record(None, "11", home_score=1, away_score=0, status=MatchStatus.LIVE))
    assert outcome is UpsertOutcome.UPDATED
    async with db.session() as session:
        assert await MatchRepository(session).count() == 1
    row = await _load_static("1")
    assert row.slug == "static-1"
    assert (row.home_score, row.away_score, row.status) == (1, 0, "live")


@pytest.mark.asyncio
async def test_insert_conflict_recovers_by_reselecting(db, monkeypatch):
    await _upsert(_record("1", "11", home_score=1, away_score=1))

    async def stale_lookup(self, record):
        # Simulates a concurrent run that inserted between lookup and insert.
        return None

    monkeypatch.setattr(MatchUpsertEngine, "resolve_existing", stale_lookup)
    async with db.session() as session:
        engine = MatchUpsertEngine(session)
        outcome = await engine.upsert(_record("1", "22", home_score=2, away_score=1))
        assert outcome is UpsertOutcome.UPDATED
        assert engine.recovered_conflicts == 1

    row = await _load_static("1")
    assert row.provider_match_id == "22"
    assert (row.home_score, row.away_score) == (2, 1)
    async with db.session() as session:
        assert await MatchRepository(session).count() == 1


@pytest.mark.asyncio
async def test_unresolvable_conflict_raises_upsert_conflict(db, monkeypatch):
    await _upsert(_record("1", "11"))

    async def nothing(self, record):
        return None

    monkeypatch.setattr(MatchUpsertEngine, "resolve_existing", nothing)
    monkeypatch.setattr(MatchUpsertEngine, "_recover", nothing)
    async with db.session() as session:
        with pytest.raises(UpsertConflict) as exc_info:
            await MatchUpsertEngine(session).upsert(_record("1", "11"))
    assert exc_info.value.natural_key == "static-1"
