"""API v1: job triggers and read endpoints."""

from fastapi import APIRouter

from .jobs import router as jobs_router
from .matches import router as matches_router
from .standings import router as standings_router

router = APIRouter(prefix="/api/v1", tags=["api_v1"])
router.include_router(jobs_router)
router.include_router(matches_router)
router.include_router(standings_router)

api_v1_router = router
