"""
Health Routes
=============

FastAPI routes for health and service information endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Request

from vocab_wallpaper.config.logging import get_logger
from vocab_wallpaper.models.schemas import HealthStatus

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request) -> HealthStatus:
    """
    Get application health status.

    Degraded when no wallpaper is available or the last cycle failed.
    """
    settings = request.app.state.settings
    service = request.app.state.generation_service
    scheduler = request.app.state.scheduler

    artifact_present = service.store.exists()
    last_outcome = service.last_outcome
    healthy = artifact_present and (last_outcome is None or last_outcome.success)

    health_status = HealthStatus(
        status="healthy" if healthy else "degraded",
        version=settings.app_version,
        artifact_present=artifact_present,
        scheduler_running=bool(scheduler and scheduler.running),
        next_run_at=scheduler.next_run_at if scheduler else None,
        generations_in_flight=service.in_flight,
        last_outcome=last_outcome,
    )

    logger.info(
        "Health check completed",
        status=health_status.status,
        artifact_present=artifact_present,
        in_flight=health_status.generations_in_flight,
    )
    return health_status


@router.get("/", tags=["General"])
async def root(request: Request) -> Dict[str, Any]:
    """
    Root endpoint with basic API information.
    """
    settings = request.app.state.settings
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Daily vocabulary wallpaper",
        "docs_url": "/docs" if settings.debug else None,
        "health_check": "/health",
        "endpoints": {
            "daily_wallpaper": "GET /daily.png",
            "public_files": "GET /public/{path}",
        },
    }
