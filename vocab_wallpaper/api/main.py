"""
FastAPI Application
==================

Serves the daily wallpaper, regenerates it on a daily schedule, and generates
it on demand when it is missing at startup or at request time.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import structlog
import uvicorn

from vocab_wallpaper.config.settings import get_settings, Settings
from vocab_wallpaper.config.logging import get_logger, setup_logging
from vocab_wallpaper.core.generation.pipeline import GenerationService, build_generation_service
from vocab_wallpaper.core.generation.scheduler import DailyScheduler
from vocab_wallpaper.api.routes.health import router as health_router
from vocab_wallpaper.api.routes.wallpaper import router as wallpaper_router
from vocab_wallpaper.models.schemas import ErrorResponse, GenerationTrigger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    # Startup
    logger.info(
        "Starting wallpaper service",
        environment=settings.environment,
        port=settings.port,
        timezone=settings.schedule_timezone,
    )

    service: Optional[GenerationService] = app.state.generation_service
    if service is None:
        service = build_generation_service(settings)
        app.state.generation_service = service

    service.store.ensure_directory()

    if not service.store.exists():
        if settings.generate_on_startup:
            logger.info("No wallpaper found, generating initial image", path=str(service.store.path))
            service.request_generation(GenerationTrigger.STARTUP_MISS)
        else:
            logger.info("No wallpaper found, waiting for first trigger")
    else:
        logger.info("Wallpaper exists", path=str(service.store.path))

    scheduler: Optional[DailyScheduler] = None
    if settings.schedule_enabled:
        scheduler = DailyScheduler(service, settings=settings)
        scheduler.start()
    app.state.scheduler = scheduler

    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down wallpaper service")

        if scheduler is not None:
            try:
                await scheduler.stop()
            except Exception as e:
                logger.error("Error stopping scheduler", error=str(e))

        try:
            await service.close()
        except Exception as e:
            logger.error("Error closing generation service", error=str(e))


async def add_request_id(request: Request, call_next):  # type: ignore
    """Add request ID to all requests."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    with structlog.contextvars.bound_contextvars(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


async def custom_http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom HTTP exception handler with structured error response."""
    error_response = ErrorResponse(
        error=str(exc.detail),
        error_code=str(exc.status_code),
        details=None,
        request_id=getattr(request.state, "request_id", None),
    )

    logger.warning(
        "HTTP exception",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=error_response.request_id,
    )

    return JSONResponse(status_code=exc.status_code, content=error_response.model_dump(mode="json"))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """General exception handler for unexpected errors."""
    settings: Settings = request.app.state.settings
    error_response = ErrorResponse(
        error="Internal server error",
        error_code="INTERNAL_ERROR",
        details={"exception": str(exc)} if settings.debug else None,
        request_id=getattr(request.state, "request_id", None),
    )

    logger.error(
        "Unhandled exception",
        exception=str(exc),
        request_id=error_response.request_id,
        exc_info=True,
    )

    return JSONResponse(status_code=500, content=error_response.model_dump(mode="json"))


def create_app(
    settings: Optional[Settings] = None, service: Optional[GenerationService] = None
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Settings to use, defaults to the global settings
        service: Prebuilt generation service; built from settings at startup when omitted

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Daily vocabulary wallpaper for phone automations",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.generation_service = service
    app.state.scheduler = None

    app.middleware("http")(add_request_id)
    app.add_exception_handler(HTTPException, custom_http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(health_router)
    app.include_router(wallpaper_router)

    settings.public_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/public", StaticFiles(directory=str(settings.public_dir)), name="public")

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False) -> None:
    """Run the service with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "vocab_wallpaper.api.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run_server(reload=get_settings().debug)
