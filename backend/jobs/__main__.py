"""
Run one ingestion job and print its JSON summary.

  python -m jobs matches --league-id 1204 --season 2024/25
  python -m jobs scores --feed d-1
  python -m jobs standings-backfill --league-id 1204 --league-id 1229 --season 2023/24 --season 2024/25
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Ensure backend on path when run as script
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from core.config import get_settings
from core.database import create_all_tables, dispose_database, init_database
from core.errors import IngestError
from core.logging import setup_logging
from jobs.registry import job_names, run_named_job


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m jobs", description="Run one ingestion job once")
    parser.add_argument("job", choices=job_names())
    parser.add_argument("--league-id", action="append", default=[], help="Provider league id (repeatable for backfill)")
    parser.add_argument("--season", action="append", default=[], help="Season, e.g. 2024/25 (repeatable for backfill)")
    parser.add_argument("--feed", default="home", help="Scores feed: home, d-1, d1 or live")
    parser.add_argument("--force", action="store_true", help="Bypass the standings unchanged-payload skip")
    return parser


def job_params(args: argparse.Namespace) -> Dict[str, Any]:
    leagues: List[str] = args.league_id
    seasons: List[str] = args.season
    return {
        "league_id": leagues[0] if leagues else None,
        "season": seasons[0] if seasons else None,
        "league_ids": leagues or None,
        "seasons": seasons or None,
        "feed": args.feed,
        "force": args.force,
    }


async def _run(args: argparse.Namespace) -> Dict[str, Any]:
    settings = get_settings()
    await init_database(settings.database_url)
    try:
        await create_all_tables()
        return await run_named_job(args.job, **job_params(args))
    finally:
        await dispose_database()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(get_settings())
    try:
        summary = asyncio.run(_run(args))
    except IngestError as exc:
        print(json.dumps({"ok": False, "error": exc.to_dict()}, indent=2, default=str))
        return 1
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    print(json.dumps(summary, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
