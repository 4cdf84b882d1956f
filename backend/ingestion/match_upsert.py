"""
Upsert engine for matches.

Lookup order: static id, then volatile id (only against rows without a
conflicting static id). Existing rows are updated in place; an incoming None
never overwrites a stored value, which makes scores sticky. New rows are
inserted inside a SAVEPOINT so a unique-constraint race with an overlapping
run can be recovered by re-selecting the winner and updating it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import UpsertConflict
from models.match import Match
from repositories.match_repo import MatchRepository

from .schema import NormalizedMatch

logger = logging.getLogger(__name__)


class UpsertOutcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"


# Match attribute <- NormalizedMatch attribute; None never overwrites.
_MERGED_FIELDS = (
    ("provider_competition_id", "provider_competition_id"),
    ("competition_id", "competition_id"),
    ("season_key", "season_key"),
    ("round", "round"),
    ("home_provider_team_id", "home_provider_team_id"),
    ("away_provider_team_id", "away_provider_team_id"),
    ("home_team_name", "home_team_name"),
    ("away_team_name", "away_team_name"),
    ("home_team_id", "home_team_id"),
    ("away_team_id", "away_team_id"),
    ("home_score", "home_score"),
    ("away_score", "away_score"),
    ("venue", "venue"),
)


class MatchUpsertEngine:
    """Idempotent match writer bound to one session (which it never commits)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repo = MatchRepository(session)
        self.recovered_conflicts = 0

    async def resolve_existing(self, record: NormalizedMatch) -> Optional[Match]:
        keys = record.keys
        if keys.static_id:
            found = await self.repo.get_by_static_id(keys.static_id)
            if found is not None:
                return found
        if keys.volatile_id:
            return await self.repo.get_by_volatile_id(keys.volatile_id, keys.static_id)
        return None

    async def upsert(self, record: NormalizedMatch) -> UpsertOutcome:
        existing = await self.resolve_existing(record)
        if existing is not None:
            apply_update(existing, record)
            await self.session.flush()
            return UpsertOutcome.UPDATED

        try:
            async with self.session.begin_nested():
                self.session.add(new_match(record))
            return UpsertOutcome.INSERTED
        except IntegrityError:
            logger.info("Unique conflict inserting %s; re-resolving", record.natural_key)

        winner = await self._recover(record)
        if winner is None:
            raise UpsertConflict(record.natural_key)
        apply_update(winner, record)
        await self.session.flush()
        self.recovered_conflicts += 1
        return UpsertOutcome.UPDATED

    async def _recover(self, record: NormalizedMatch) -> Optional[Match]:
        """Re-select by each natural key that can collide: static id, slug, volatile id."""
        keys = record.keys
        if keys.static_id:
            found = await self.repo.get_by_static_id(keys.static_id)
            if found is not None:
                return found
        if keys.slug:
            found = await self.repo.get_by_slug(keys.slug)
            if found is not None:
                return found
        if keys.volatile_id:
            return await self.repo.get_by_volatile_id(keys.volatile_id, keys.static_id)
        return None


def new_match(record: NormalizedMatch) -> Match:
    row = Match(
        slug=record.keys.slug,
        provider_static_id=record.keys.static_id,
        provider_match_id=record.keys.volatile_id,
        competition=record.competition_name,
        status=record.status.value,
        kickoff_utc=record.kickoff_utc,
        updated_at_utc=datetime.now(timezone.utc),
    )
    for column, source in _MERGED_FIELDS:
        setattr(row, column, getattr(record, source))
    return row


def apply_update(row: Match, record: NormalizedMatch) -> None:
    """Merge a record into an existing row. The slug is never rewritten."""
    if record.keys.static_id:
        row.provider_static_id = record.keys.static_id
    if record.keys.volatile_id:
        row.provider_match_id = record.keys.volatile_id
    row.competition = record.competition_name or row.competition
    row.status = record.status.value
    row.kickoff_utc = record.kickoff_utc
    for column, source in _MERGED_FIELDS:
        value = getattr(record, source)
        if value is not None:
            setattr(row, column, value)
    row.updated_at_utc = datetime.now(timezone.utc)
