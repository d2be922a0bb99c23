"""Output image formats and their extension / encoder mappings."""

from enum import StrEnum

from ....errors import UnsupportedFormat


class ImageFormat(StrEnum):
    JPEG = "jpeg"
    GIF = "gif"
    PNG = "png"
    BMP = "bmp"
    TIFF = "tiff"
    EMF = "emf"


_FORMAT_NAMES: frozenset[str] = frozenset(fmt.value for fmt in ImageFormat)

_EXTENSIONS: dict[str, ImageFormat] = {
    ".jpg": ImageFormat.JPEG,
    ".jpeg": ImageFormat.JPEG,
    ".gif": ImageFormat.GIF,
    ".png": ImageFormat.PNG,
    ".bmp": ImageFormat.BMP,
    ".tif": ImageFormat.TIFF,
    ".tiff": ImageFormat.TIFF,
    ".emf": ImageFormat.EMF,
}

_CANONICAL_EXTENSIONS: dict[ImageFormat, str] = {
    ImageFormat.JPEG: ".jpg",
    ImageFormat.GIF: ".gif",
    ImageFormat.PNG: ".png",
    ImageFormat.BMP: ".bmp",
    ImageFormat.TIFF: ".tiff",
    ImageFormat.EMF: ".emf",
}

# Pillow writes EMF through its WMF plugin, which needs a registered save handler.
_ENCODERS: dict[ImageFormat, str] = {
    ImageFormat.JPEG: "JPEG",
    ImageFormat.GIF: "GIF",
    ImageFormat.PNG: "PNG",
    ImageFormat.BMP: "BMP",
    ImageFormat.TIFF: "TIFF",
    ImageFormat.EMF: "WMF",
}

_MIME_TYPES: dict[ImageFormat, str] = {
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.GIF: "image/gif",
    ImageFormat.PNG: "image/png",
    ImageFormat.BMP: "image/bmp",
    ImageFormat.TIFF: "image/tiff",
    ImageFormat.EMF: "image/emf",
}


def parse_format(extension: str) -> ImageFormat:
    """Get the ImageFormat for a file extension such as ".jpg" or "TIF".

    Raises:
        UnsupportedFormat: If the extension is not recognised
    """
    ext = extension.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext

    try:
        return _EXTENSIONS[ext]
    except KeyError:
        raise UnsupportedFormat(extension) from None


def canonical_extension(fmt: ImageFormat) -> str:
    return _CANONICAL_EXTENSIONS[fmt]


def encoder_for(fmt: ImageFormat) -> str:
    """Pillow format name used to encode ``fmt`` (PNG for anything unmapped)."""
    return _ENCODERS.get(fmt, "PNG")


def mime_type_for(fmt: ImageFormat) -> str:
    return _MIME_TYPES.get(fmt, "application/octet-stream")


def resolve_format(
    value: ImageFormat | str | None,
    *,
    default_to_png: bool = False,
) -> ImageFormat:
    """Normalise a requested output format.

    Args:
        value: ImageFormat, format name ("jpeg") or extension (".jpg")
        default_to_png: Fall back to PNG for missing/unknown values
                        instead of raising

    Returns:
        Resolved ImageFormat

    Raises:
        UnsupportedFormat: If value is missing or unknown and
                           default_to_png is False
    """
    if isinstance(value, ImageFormat):
        return value

    if value is None or not value.strip():
        if default_to_png:
            return ImageFormat.PNG
        raise UnsupportedFormat(value)

    name = value.strip().lower()
    if name in _FORMAT_NAMES:
        return ImageFormat(name)

    try:
        return parse_format(name)
    except UnsupportedFormat:
        if default_to_png:
            return ImageFormat.PNG
        raise
