"""
Wallpaper Routes
================

Serves the latest wallpaper. A miss answers 404 and starts a generation in
the background; the client is expected to retry later.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from vocab_wallpaper.config.logging import get_logger
from vocab_wallpaper.core.generation.pipeline import GenerationService
from vocab_wallpaper.core.storage.store import ArtifactAbsent
from vocab_wallpaper.models.schemas import GenerationTrigger

logger = get_logger(__name__)

router = APIRouter(tags=["Wallpaper"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def get_generation_service(request: Request) -> GenerationService:
    """Dependency returning the application's generation service."""
    return request.app.state.generation_service


@router.get("/daily.png", response_class=StreamingResponse)
async def daily_wallpaper(
    request: Request, service: GenerationService = Depends(get_generation_service)
) -> Response:
    """
    Stream the latest wallpaper with caching disabled.

    Returns 404 with a plain-text body when no wallpaper exists yet, after
    requesting a generation that the response does not wait for.
    """
    store = service.store
    try:
        handle = await store.open_artifact()
    except ArtifactAbsent:
        logger.info(
            "Wallpaper requested before generation",
            path=str(store.path),
            request_id=getattr(request.state, "request_id", None),
        )
        service.request_generation(GenerationTrigger.REQUEST_MISS)
        return PlainTextResponse("Image not found. Generating...", status_code=404)

    return StreamingResponse(
        store.iter_artifact(handle), media_type="image/png", headers=NO_CACHE_HEADERS
    )
