import logging

from fastapi import FastAPI

from core.config import get_settings
from core.database import create_all_tables, dispose_database, init_database
from core.logging import setup_logging
from routes.api_v1 import api_v1_router
from scheduler import start_scheduler, stop_scheduler

settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.include_router(api_v1_router)


@app.on_event("startup")
async def on_startup() -> None:
    """Application startup hook."""
    await init_database(settings.database_url)
    await create_all_tables()
    start_scheduler(settings)
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    """Application shutdown hook."""
    stop_scheduler()
    await dispose_database()
    logger.info("Application shutdown complete")


@app.get("/health")
async def health() -> dict:
    """Simple health check endpoint."""
    return {"status": "ok"}
