"""cl_thumbnailer - fetch, resize, crop and re-encode images and website snapshots."""

from .config import ThumbnailerSettings, get_settings
from .errors import (
    CaptureFailed,
    ImageDecodeError,
    NotInitialized,
    ThumbnailerError,
    TransformFailed,
    UnsupportedFormat,
)
from .master import create_app, create_master_router
from .plugins.image_scale.algo.image_format import ImageFormat
from .plugins.image_scale.schema import CropRectangle, ImageScaleParams, TransformResult
from .service import ThumbnailService
from .utils.response_cache import ResponseCache

__version__ = "0.1.0"

__all__ = [
    "ThumbnailService",
    "ThumbnailerSettings",
    "get_settings",
    "ImageFormat",
    "ImageScaleParams",
    "CropRectangle",
    "TransformResult",
    "ResponseCache",
    "ThumbnailerError",
    "UnsupportedFormat",
    "ImageDecodeError",
    "NotInitialized",
    "TransformFailed",
    "CaptureFailed",
    "create_app",
    "create_master_router",
    "__version__",
]
