"""Render/encode pipeline: draw a source bitmap into a target canvas and encode it."""

from io import BytesIO

from PIL import Image

from ....errors import TransformFailed
from ....utils.profiling import timed
from ..schema import CropRectangle
from .image_format import ImageFormat, encoder_for
from .proportions import ImageGeometry

DEFAULT_QUALITY = 50

TRANSPARENT = (0, 0, 0, 0)


def _draw(
    source: Image.Image,
    canvas: Image.Image,
    box: tuple[int, int, int, int],
    resample: Image.Resampling,
) -> None:
    normalized = source if source.mode == "RGBA" else source.convert("RGBA")

    try:
        scaled = normalized.resize(canvas.size, resample, box=box)
        try:
            canvas.alpha_composite(scaled)
        finally:
            scaled.close()
    finally:
        if normalized is not source:
            normalized.close()


def _encode(canvas: Image.Image, fmt: ImageFormat, quality: int) -> bytes:
    buffer = BytesIO()

    if fmt == ImageFormat.JPEG:
        # JPEG has no alpha channel
        rgb = canvas.convert("RGB")
        try:
            rgb.save(buffer, format=encoder_for(fmt), quality=quality)
        finally:
            rgb.close()
    else:
        canvas.save(buffer, format=encoder_for(fmt))

    return buffer.getvalue()


@timed
def render(
    source: Image.Image,
    geometry: ImageGeometry,
    fmt: ImageFormat,
    *,
    quality: int = DEFAULT_QUALITY,
    crop: CropRectangle | None = None,
    resample: Image.Resampling = Image.Resampling.BILINEAR,
) -> bytes:
    """
    Draw ``source`` into a new canvas of ``geometry.canvas_size`` and encode it.

    The source is consumed: it is closed before this function returns,
    whether or not rendering succeeds.

    Args:
        source: Decoded source bitmap (ownership is transferred)
        geometry: Sizing state; its canvas size is the output size
        fmt: Output format
        quality: JPEG quality (1-100); ignored for other formats
        crop: Source-space region to draw; defaults to the whole source
        resample: Resampling filter; JPEG output always uses BICUBIC

    Returns:
        Encoded image bytes

    Raises:
        NotInitialized: If geometry has no natural size yet
        TransformFailed: If the crop is out of bounds or drawing/encoding fails
    """
    canvas: Image.Image | None = None
    try:
        try:
            canvas_size = geometry.canvas_size
            natural_width, natural_height = source.size

            if crop is None:
                box = (0, 0, natural_width, natural_height)
            elif crop.fits_within(natural_width, natural_height):
                box = crop.box
            else:
                raise TransformFailed(
                    f"Crop rectangle {crop.box} exceeds source bounds "
                    + f"{natural_width}x{natural_height}"
                )

            if fmt == ImageFormat.JPEG:
                resample = Image.Resampling.BICUBIC

            try:
                canvas = Image.new("RGBA", canvas_size, TRANSPARENT)
                _draw(source, canvas, box, resample)
            except (OSError, ValueError, MemoryError) as exc:
                raise TransformFailed(
                    f"Failed to draw {natural_width}x{natural_height} source: {exc}"
                ) from exc
        finally:
            # The source must not be read past this point
            source.close()

        try:
            return _encode(canvas, fmt, quality)
        except (OSError, ValueError, KeyError) as exc:
            raise TransformFailed(f"Failed to encode {fmt.value}: {exc}") from exc

    finally:
        if canvas is not None:
            canvas.close()
