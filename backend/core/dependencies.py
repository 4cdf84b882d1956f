import hmac
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from feed.client import FeedClient

from .config import Settings, get_settings
from .database import get_database_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding an AsyncSession from the DatabaseManager."""
    manager = get_database_manager()
    async with manager.session() as session:
        yield session


async def get_feed_client(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[FeedClient, None]:
    """FastAPI dependency yielding a FeedClient closed after the request."""
    async with FeedClient(settings) as client:
        yield client


def require_job_secret(
    settings: Settings = Depends(get_settings),
    x_sync_secret: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> None:
    """Shared-secret guard for job triggers: X-Sync-Secret or Authorization: Bearer."""
    expected = settings.job_secret
    if not expected:
        raise HTTPException(status_code=500, detail="Job secret is not configured")

    provided = x_sync_secret
    if not provided and authorization and authorization.lower().startswith("bearer "):
        provided = authorization[7:].strip()
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")
