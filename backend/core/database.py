"""
Async engine and session lifecycle for the ingestion store.

One process-wide DatabaseManager is created by init_database() (app startup,
job CLI, tests). Sessions commit on clean exit and roll back on error; jobs
and services open them, repositories only receive them.

SQLite needs two tweaks so the match upsert engine can recover unique-constraint
races inside a SAVEPOINT: pysqlite's implicit transaction handling is switched
off and SQLAlchemy emits BEGIN itself.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _configure_sqlite(engine: AsyncEngine) -> None:
    """Foreign keys on, WAL where the file system allows it, SAVEPOINT-capable transactions."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # pragma: no cover
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:  # pragma: no cover
        conn.exec_driver_sql("BEGIN")


class DatabaseManager:
    """Owns the async engine and the session factory for one database URL."""

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def database_url(self) -> str:
        return self._database_url

    @property
    def engine(self) -> Optional[AsyncEngine]:
        return self._engine

    async def init(self) -> None:
        if self._engine is not None:
            return

        if _is_sqlite(self._database_url):
            self._engine = create_async_engine(self._database_url)
            _configure_sqlite(self._engine)
        else:
            self._engine = create_async_engine(self._database_url, pool_pre_ping=True)

        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False, class_=AsyncSession)
        logger.info("Database ready (%s)", self._engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Unit of work: commit on success, rollback and re-raise on error."""
        if self._sessionmaker is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")

        session: AsyncSession = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create every registered table that does not exist yet."""
        import models  # noqa: F401 - register models
        from models.base import Base

        if self._engine is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


_db_manager: Optional[DatabaseManager] = None


async def init_database(database_url: str) -> None:
    global _db_manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    await _db_manager.init()


async def create_all_tables() -> None:
    await get_database_manager().create_tables()


async def dispose_database() -> None:
    global _db_manager

    if _db_manager is not None:
        await _db_manager.dispose()
        _db_manager = None


def get_database_manager() -> DatabaseManager:
    if _db_manager is None:
        raise RuntimeError("DatabaseManager is not initialized.")
    return _db_manager
