"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Request

from config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "weather-cache-proxy", "commit": settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Reports city directory size and current cache occupancy."""
    dispatcher = getattr(request.app.state, "dispatcher", None)
    result = {"status": "ok", "service": "weather-cache-proxy", "commit": settings.git_sha}

    if dispatcher is None:
        result["status"] = "starting"
        result["cities"] = 0
        result["cache_entries"] = 0
        return result

    result["cities"] = len(dispatcher.directory)
    result["cache_entries"] = len(dispatcher.cache)
    if not result["cities"]:
        logger.warning("Health check: city directory is empty")
        result["status"] = "degraded"
    return result
