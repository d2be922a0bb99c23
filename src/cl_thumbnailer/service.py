"""ThumbnailService - the synchronous transform entry point."""

import httpx
from loguru import logger

from .config import ThumbnailerSettings, get_settings
from .plugins.image_scale.algo.image_format import ImageFormat, mime_type_for, resolve_format
from .plugins.image_scale.algo.image_scale import render
from .plugins.image_scale.algo.image_source import (
    CaptureFn,
    ImageSource,
    LocalFileSource,
    RemoteImageSource,
    WebsiteSnapshotSource,
)
from .plugins.image_scale.algo.proportions import ImageGeometry
from .plugins.image_scale.schema import ImageScaleParams, TransformResult
from .utils.media_types import MediaType


class ThumbnailService:
    """Acquire a source image, size it, and encode it.

    Example:
        service = ThumbnailService()
        result = service.transform(
            ImageScaleParams(url="https://example.com/logo.png", width=200, format="jpeg")
        )
        if result.warning:
            print(result.warning)
        result.save_to("thumb.jpg")
    """

    def __init__(
        self,
        settings: ThumbnailerSettings | None = None,
        *,
        http_client: httpx.Client | None = None,
        capture: CaptureFn | None = None,
    ):
        """Initialize the service.

        Args:
            settings: Configuration. Defaults to get_settings()
            http_client: Client for remote image fetches (one per call if None)
            capture: Website capture function (headless Chromium if None)
        """
        self.settings: ThumbnailerSettings = settings if settings is not None else get_settings()
        self.http_client: httpx.Client | None = http_client
        self.capture: CaptureFn | None = capture

    def source_for(self, params: ImageScaleParams) -> ImageSource:
        if params.path is not None:
            return LocalFileSource(params.path)

        assert params.url is not None
        if MediaType.from_url(params.url) == MediaType.IMAGE:
            return RemoteImageSource(
                params.url,
                self.settings.resolve_placeholder(),
                timeout=self.settings.fetch_timeout,
                client=self.http_client,
            )

        return WebsiteSnapshotSource(
            params.url,
            params.width,
            params.height,
            viewport_width=self.settings.viewport_width,
            viewport_height=self.settings.viewport_height,
            timeout=self.settings.capture_timeout,
            poll_interval=self.settings.capture_poll_interval,
            capture=self.capture,
        )

    def resolve_format(self, params: ImageScaleParams) -> ImageFormat:
        value = params.format if params.format is not None else self.settings.default_format
        return resolve_format(value, default_to_png=self.settings.default_to_png)

    @staticmethod
    def apply_size(geometry: ImageGeometry, params: ImageScaleParams) -> None:
        """Apply the requested size: height first, then width."""
        if params.fit:
            width, height = geometry.size
            geometry.set_max_proportions(params.height or height, params.width or width)
            return

        if params.height is not None:
            geometry.set_height(params.height)
        if params.width is not None:
            geometry.set_width(params.width)

    def transform(self, params: ImageScaleParams) -> TransformResult:
        """
        Run one transform.

        Returns:
            TransformResult with the encoded bytes and an optional warning
            (set when a remote image could not be fetched and the
            placeholder was used instead)

        Raises:
            UnsupportedFormat: If the output format is unknown
            FileNotFoundError: If a local source or the placeholder is missing
            ImageDecodeError: If the source is not a readable image
            CaptureFailed: If the website could not be rendered
            TransformFailed: If drawing or encoding fails
        """
        fmt = self.resolve_format(params)
        quality = params.quality if params.quality is not None else self.settings.default_quality

        source = self.source_for(params).load()
        try:
            geometry = source.geometry(constrain_proportions=params.constrain_proportions)
            self.apply_size(geometry, params)
        except Exception:
            source.close()
            raise

        width, height = geometry.canvas_size
        content = render(
            source.image,
            geometry,
            fmt,
            quality=quality,
            crop=params.crop,
            resample=source.resample,
        )

        logger.info(
            f"Transformed {source.kind} source {source.natural_size[0]}x{source.natural_size[1]} "
            + f"-> {width}x{height} {fmt.value} ({len(content)} bytes)"
        )

        return TransformResult(
            content=content,
            format=fmt,
            media_type=mime_type_for(fmt),
            width=width,
            height=height,
            source_kind=source.kind,
            warning=source.warning,
        )
