"""Public algorithm API for cl_thumbnailer.

This module exports the building blocks of the transform pipeline for
direct use without the service or the FastAPI app.

Example:
    Resize a local file to 400 pixels wide, keeping proportions::

        from cl_thumbnailer.algorithms import (
            ImageFormat,
            LocalFileSource,
            render,
        )

        with LocalFileSource("photo.jpg").load() as source:
            geometry = source.geometry()
            geometry.set_width(400)
            data = render(source.image, geometry, ImageFormat.JPEG, quality=80)

    Snapshot a website::

        from cl_thumbnailer.algorithms import capture_website_thumbnail

        image = capture_website_thumbnail("https://example.com", 1024, 768, 320, 240)
        image.save("example.png")
"""

# Formats
from .plugins.image_scale.algo.image_format import (
    ImageFormat,
    canonical_extension,
    encoder_for,
    mime_type_for,
    parse_format,
    resolve_format,
)

# Rendering
from .plugins.image_scale.algo.image_scale import render

# Sources
from .plugins.image_scale.algo.image_source import (
    AcquiredSource,
    LocalFileSource,
    RemoteImageSource,
    StreamSource,
    WebsiteSnapshotSource,
    decode_image,
)

# Sizing
from .plugins.image_scale.algo.proportions import ImageGeometry

# Website capture
from .plugins.website_thumbnail.algo.browser_capture import (
    RenderingSurface,
    capture_website,
    capture_website_thumbnail,
)
from .plugins.website_thumbnail.algo.playwright_surface import PlaywrightSurface

__all__ = [
    "ImageFormat",
    "parse_format",
    "canonical_extension",
    "encoder_for",
    "mime_type_for",
    "resolve_format",
    "ImageGeometry",
    "AcquiredSource",
    "LocalFileSource",
    "StreamSource",
    "RemoteImageSource",
    "WebsiteSnapshotSource",
    "decode_image",
    "render",
    "RenderingSurface",
    "capture_website",
    "capture_website_thumbnail",
    "PlaywrightSurface",
]
