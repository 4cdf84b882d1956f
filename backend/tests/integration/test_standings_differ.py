"""
Standings snapshot differ: unchanged payloads write nothing, changes create a
new immutable snapshot, unmapped teams abort before any write.
"""

from __future__ import annotations

import pytest

from core.errors import MissingTeamMapping
from ingestion.shapes import extract_standings
from ingestion.standings_differ import apply_standings
from repositories.standings_repo import StandingsRepository

from payloads import seed_teams, standings_payload, standings_team

LEAGUE = "1204"
SEASON = "2024/2025"
TEAMS = [("101", "Arsenal"), ("102", "Chelsea"), ("103", "Liverpool")]


def _extracted(points=(7, 6, 4), timestamp="10.08.2024 18:30:00"):
    rows = [standings_team(pid, name, pos + 1, pts) for pos, ((pid, name), pts) in enumerate(zip(TEAMS, points))]
    return extract_standings(standings_payload(rows, timestamp=timestamp))


async def _apply(db, extracted, force=False):
    async with db.session() as session:
        return await apply_standings(session, LEAGUE, SEASON, extracted, force=force, source_name="goalserve")


async def _count(db) -> int:
    async with db.session() as session:
        return await StandingsRepository(session).count_snapshots(LEAGUE, SEASON)


@pytest.mark.asyncio
async def test_first_ingest_writes_snapshot_and_rows(db):
    team_ids = await seed_teams(db, TEAMS)
    result = await _apply(db, _extracted())
    assert result.skipped is False
    assert result.inserted_rows == 3
    assert result.as_of.isoformat() == "2024-08-10T18:30:00+00:00"

    async with db.session() as session:
        rows = await StandingsRepository(session).list_rows(result.snapshot_id)
    assert [r.team_id for r in rows] == [team_ids["101"], team_ids["102"], team_ids["103"]]
    assert rows[0].points == 7
    assert rows[0].home_played == 2


@pytest.mark.asyncio
async def test_unchanged_payload_is_skipped(db):
    await seed_teams(db, TEAMS)
    first = await _apply(db, _extracted())
    # Only the provider timestamp moved; team rows are identical.
    second = await _apply(db, _extracted(timestamp="11.08.2024 09:00:00"))
    assert second.skipped is True
    assert second.inserted_rows == 0
    assert second.snapshot_id == first.snapshot_id
    assert await _count(db) == 1


@pytest.mark.asyncio
async def test_changed_points_create_new_snapshot(db):
    await seed_teams(db, TEAMS)
    first = await _apply(db, _extracted())
    second = await _apply(db, _extracted(points=(7, 7, 4)))
    assert second.skipped is False
    assert second.snapshot_id != first.snapshot_id
    assert second.payload_hash != first.payload_hash
    assert await _count(db) == 2
    async with db.session() as session:
        latest = await StandingsRepository(session).get_latest_snapshot(LEAGUE, SEASON)
    assert latest.id == second.snapshot_id


@pytest.mark.asyncio
async def test_force_writes_even_when_unchanged(db):
    await seed_teams(db, TEAMS)
    await _apply(db, _extracted())
    forced = await _apply(db, _extracted(), force=True)
    assert forced.skipped is False
    assert await _count(db) == 2


@pytest.mark.asyncio
async def test_missing_team_mapping_aborts_without_writes(db):
    await seed_teams(db, TEAMS[:2])
    with pytest.raises(MissingTeamMapping) as exc_info:
        await _apply(db, _extracted())
    err = exc_info.value
    assert err.missing == [{"provider_team_id": "103", "name": "Liverpool"}]
    payload = err.to_dict()
    assert payload["kind"] == "missing_team_mapping"
    assert payload["missing_count"] == 1
    assert await _count(db) == 0
