import asyncio
import sys
from typing import List

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

from core.config import get_settings
from core.database import create_all_tables, dispose_database, get_database_manager, init_database
from models.base import Base
import models  # noqa: F401


def find_stale_tables(conn: Connection) -> List[str]:
    """Existing tables that lack columns the models expect (create_all never alters them)."""
    inspector = inspect(conn)
    problems: List[str] = []
    for name, table in sorted(Base.metadata.tables.items()):
        if not inspector.has_table(name):
            continue
        current = {c["name"] for c in inspector.get_columns(name)}
        missing = set(table.columns.keys()) - current
        if missing:
            problems.append(f"{name}: missing {sorted(missing)}")
    return problems


async def main() -> int:
    settings = get_settings()
    await init_database(settings.database_url)
    try:
        engine = get_database_manager().engine
        async with engine.connect() as conn:
            stale = await conn.run_sync(find_stale_tables)
        if stale:
            for line in stale:
                print(f"Schema mismatch: {line}", file=sys.stderr)
            return 1
        await create_all_tables()
    finally:
        await dispose_database()
    print("schema ok")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
