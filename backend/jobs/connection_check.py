"""Provider connectivity probe against the home scores feed."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from feed.client import FeedClient
from feed.paths import CONNECTION_TEST_PATH
from ingestion.tree import top_level_keys

from .observability import JobContext


async def test_connection(ctx: JobContext, client: FeedClient) -> Dict[str, Any]:
    tree = await client.fetch(CONNECTION_TEST_PATH, ctx)
    return {
        "ok": True,
        "receivedAt": datetime.now(timezone.utc).isoformat(),
        "topLevelKeys": top_level_keys(tree),
    }
