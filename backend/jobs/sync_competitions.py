"""Competition sync from the provider league list."""

from __future__ import annotations

from typing import Any, Dict

from core.database import get_database_manager
from core.errors import ShapeNotFound
from feed.client import FeedClient
from feed.paths import LEAGUE_LIST_PATH
from ingestion.normalize import slugify
from ingestion.tree import as_array, attr, child, top_level_keys
from models.competition import Competition
from repositories.competition_repo import CompetitionRepository

from .observability import JobContext


async def sync_competitions(ctx: JobContext, client: FeedClient) -> Dict[str, Any]:
    """Upsert competitions by provider id (name, country and type are refreshed)."""
    tree = await client.fetch(LEAGUE_LIST_PATH, ctx)
    leagues = [lg for lg in as_array(child(tree, "leagues", "league")) if isinstance(lg, dict)]
    if not leagues:
        raise ShapeNotFound(top_level_keys(tree), {"expected": "leagues.league"})

    upserted = inserted = 0
    async with get_database_manager().session() as session:
        repo = CompetitionRepository(session)
        for league in leagues:
            provider_id, name = attr(league, "id"), attr(league, "name")
            if not provider_id or not name:
                ctx.incr("skippedIncomplete")
                continue
            country = attr(league, "country")
            kind = attr(league, "type") or "league"
            existing = await repo.get_by_provider_id(provider_id)
            if existing is None:
                await repo.add(
                    Competition(
                        name=name,
                        slug=slugify(name),
                        provider_competition_id=provider_id,
                        country=country,
                        type=kind,
                        season=attr(league, "season"),
                    )
                )
                await session.flush()
                inserted += 1
            else:
                existing.name = name
                existing.country = country
                existing.type = kind
            upserted += 1

    return {"upserted": upserted, "inserted": inserted, "providerLeagues": len(leagues)}
