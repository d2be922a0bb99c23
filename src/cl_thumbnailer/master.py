"""Master module - route aggregator and FastAPI application factory."""

from fastapi import APIRouter, FastAPI

from .config import ThumbnailerSettings, get_settings
from .plugins.image_scale.routes import create_router as create_image_scale_router
from .service import ThumbnailService
from .utils.response_cache import ResponseCache


def create_master_router(
    service: ThumbnailService,
    cache: ResponseCache | None = None,
) -> APIRouter:
    """Combine all plugin routes into one router.

    Args:
        service: ThumbnailService shared by the routes
        cache: Response cache, or None to disable caching

    Returns:
        Combined APIRouter

    Example:
        from fastapi import FastAPI
        from cl_thumbnailer import ThumbnailService, create_master_router

        app = FastAPI()
        app.include_router(create_master_router(ThumbnailService()), prefix="/api")
    """
    master = APIRouter()
    master.include_router(create_image_scale_router(service, cache))
    return master


def create_app(settings: ThumbnailerSettings | None = None) -> FastAPI:
    """Build the thumbnailer application from settings."""
    settings = settings if settings is not None else get_settings()

    service = ThumbnailService(settings)
    cache = ResponseCache(ttl_seconds=settings.cache_ttl_seconds) if settings.cache_enabled else None

    app = FastAPI(title="cl_thumbnailer")
    app.include_router(create_master_router(service, cache))
    return app
