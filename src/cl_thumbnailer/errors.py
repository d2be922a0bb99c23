"""Exception hierarchy for cl_thumbnailer.

Missing input files are reported with the builtin ``FileNotFoundError``;
everything else the pipeline can fail with derives from ``ThumbnailerError``.
"""

from typing import override


class ThumbnailerError(Exception):
    """Base class for thumbnailer errors."""

    def __init__(self, message: str = "An unknown thumbnailer error occurred."):
        self.message: str = message
        super().__init__(self.message)

    @override
    def __str__(self):
        return f"{type(self).__name__}: {self.message}"


class UnsupportedFormat(ThumbnailerError):
    def __init__(self, value: object):
        self.value: object = value
        super().__init__(f"Unsupported image format: {value!r}")


class ImageDecodeError(ThumbnailerError):
    """Raised when source bytes cannot be decoded as an image."""


class NotInitialized(ThumbnailerError):
    """Raised when geometry is mutated before a source image is loaded."""

    def __init__(self, message: str = "Source image not loaded; natural dimensions unknown"):
        super().__init__(message)


class TransformFailed(ThumbnailerError):
    """Raised when drawing or encoding the target canvas fails."""


class CaptureFailed(ThumbnailerError):
    """Raised when the headless browser cannot be started or snapshotted."""
