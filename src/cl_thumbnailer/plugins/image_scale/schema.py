"""Image scale parameters and result schemas."""

from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .algo.image_format import ImageFormat


class CropRectangle(BaseModel):
    """Source-space region (in natural pixels) drawn into the target canvas."""

    x: int = Field(default=0, ge=0, description="Left edge in source pixels")
    y: int = Field(default=0, ge=0, description="Top edge in source pixels")
    width: int = Field(..., ge=1, description="Region width in source pixels")
    height: int = Field(..., ge=1, description="Region height in source pixels")

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def box(self) -> tuple[int, int, int, int]:
        """(left, upper, right, lower) as used by Pillow."""
        return self.x, self.y, self.x + self.width, self.y + self.height

    def fits_within(self, width: int, height: int) -> bool:
        return self.x + self.width <= width and self.y + self.height <= height


class ImageScaleParams(BaseModel):
    """Parameters for one transform request.

    Attributes:
        url: Image or website URL (exactly one of url/path is required)
        path: Local image file
        width: Target width in pixels (None = follow height / natural size)
        height: Target height in pixels (None = follow width / natural size)
        format: Output format; None uses the service default
        quality: JPEG quality (1-100), ignored for other formats
        crop: Optional source-space crop region
        constrain_proportions: Keep aspect ratio when setting width/height
        fit: Treat width/height as maximum bounds instead of exact targets
    """

    url: str | None = None
    path: str | None = None
    width: int | None = Field(default=None, ge=1, description="Target width in pixels")
    height: int | None = Field(default=None, ge=1, description="Target height in pixels")
    format: ImageFormat | str | None = None
    quality: int | None = Field(default=None, ge=1, le=100, description="JPEG quality (1-100)")
    crop: CropRectangle | None = None
    constrain_proportions: bool = True
    fit: bool = False

    @model_validator(mode="after")
    def validate_source(self) -> "ImageScaleParams":
        if (self.url is None) == (self.path is None):
            raise ValueError("Exactly one of 'url' or 'path' must be given")
        return self


SourceKind = Literal["file", "stream", "image_url", "website"]


class TransformResult(BaseModel):
    """Encoded output of a transform, plus an optional non-fatal warning."""

    content: bytes = Field(..., repr=False)
    format: ImageFormat
    media_type: str
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    source_kind: SourceKind
    warning: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.warning is None

    def save_to(self, path: str | Path) -> Path:
        """Write the encoded image to path, creating parent directories.

        Returns:
            The path written
        """
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        _ = output_path.write_bytes(self.content)
        return output_path
