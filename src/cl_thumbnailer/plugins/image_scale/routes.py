"""Image scale route factory."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response
from loguru import logger

from ...errors import CaptureFailed, ImageDecodeError, TransformFailed, UnsupportedFormat
from ...service import ThumbnailService
from ...utils.media_types import contains_url
from ...utils.response_cache import ResponseCache, make_cache_key
from .schema import ImageScaleParams

WARNING_HEADER = "X-Thumbnail-Warning"


def create_router(
    service: ThumbnailService,
    cache: ResponseCache | None = None,
) -> APIRouter:
    """Create router with injected dependencies.

    Args:
        service: ThumbnailService performing the transforms
        cache: Response cache; None disables caching

    Returns:
        APIRouter with the GET /getimage endpoint
    """
    router = APIRouter()

    # Declared sync so FastAPI runs it in its threadpool; transforms block.
    @router.get("/getimage", response_class=Response)
    def get_image(
        url: Annotated[str, Query(description="Image URL or website URL to render")],
        w: Annotated[int | None, Query(gt=0, description="Target width in pixels")] = None,
        h: Annotated[int | None, Query(gt=0, description="Target height in pixels")] = None,
        format: Annotated[
            str | None, Query(description="Output format (png, jpeg, .jpg, gif, bmp, tiff)")
        ] = None,
        quality: Annotated[
            int | None, Query(ge=1, le=100, description="JPEG quality (1-100)")
        ] = None,
        fit: Annotated[bool, Query(description="Treat w/h as maximum bounds")] = False,
    ) -> Response:
        """Return the source at the requested size, encoded in the requested format."""
        if not contains_url(url):
            raise HTTPException(status_code=400, detail=f"Not an http(s) URL: {url}")

        params = ImageScaleParams(url=url, width=w, height=h, format=format, quality=quality, fit=fit)

        try:
            fmt = service.resolve_format(params)
        except UnsupportedFormat as exc:
            raise HTTPException(status_code=400, detail=exc.message) from exc

        resolved_quality = quality if quality is not None else service.settings.default_quality
        key = make_cache_key(url, h, w, fmt.value, resolved_quality)
        result = cache.get(key) if cache is not None else None

        if result is None:
            try:
                result = service.transform(params)
            except UnsupportedFormat as exc:
                raise HTTPException(status_code=400, detail=exc.message) from exc
            except ImageDecodeError as exc:
                raise HTTPException(status_code=422, detail=exc.message) from exc
            except CaptureFailed as exc:
                raise HTTPException(status_code=502, detail=exc.message) from exc
            except (TransformFailed, FileNotFoundError) as exc:
                logger.error(f"Transform of {url} failed: {exc}")
                raise HTTPException(status_code=500, detail=str(exc)) from exc

            # Placeholder results are not cached so a later fetch can succeed
            if cache is not None and result.warning is None:
                cache.put(key, result)

        headers = {WARNING_HEADER: result.warning} if result.warning else None
        return Response(content=result.content, media_type=result.media_type, headers=headers)

    _ = get_image
    return router
