"""Source acquisition: local files, streams, remote images and website snapshots.

Every source yields an ``AcquiredSource`` owning a fully decoded PIL image.
The caller owns the image from then on and must close it (``AcquiredSource``
is a context manager for that purpose).
"""

from collections.abc import Callable
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Protocol

import httpx
from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from ....errors import ImageDecodeError
from ...website_thumbnail.algo.browser_capture import capture_website_thumbnail
from ..schema import SourceKind
from .proportions import ImageGeometry

IMAGE_NOT_FOUND = "Image was not found"

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "cl_thumbnailer/0.1"
)

CaptureFn = Callable[..., Image.Image]


@dataclass
class AcquiredSource:
    """A decoded source bitmap plus a non-fatal warning, if any."""

    image: Image.Image
    kind: SourceKind
    warning: str | None = None
    resample: Image.Resampling = Image.Resampling.BILINEAR

    @property
    def natural_size(self) -> tuple[int, int]:
        return self.image.size

    def geometry(self, *, constrain_proportions: bool = True) -> ImageGeometry:
        return ImageGeometry.from_size(
            self.natural_size,
            constrain_proportions=constrain_proportions,
        )

    def close(self) -> None:
        self.image.close()

    def __enter__(self) -> "AcquiredSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ImageSource(Protocol):
    """Anything that can produce a decoded source bitmap."""

    def load(self) -> AcquiredSource: ...


def decode_image(data: bytes | BinaryIO, *, origin: str) -> Image.Image:
    """Decode image bytes completely so no file handle outlives the call.

    EXIF orientation is applied here, so the returned size is the size the
    image is displayed at.

    Raises:
        ImageDecodeError: If Pillow cannot identify or decode the data
    """
    stream = BytesIO(data) if isinstance(data, bytes) else data
    try:
        image = Image.open(stream)
        image.load()
        _ = ImageOps.exif_transpose(image, in_place=True)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"Cannot decode image from {origin}: {exc}") from exc
    return image


class LocalFileSource:
    def __init__(self, path: str | Path):
        self.path: Path = Path(path)

    def load(self) -> AcquiredSource:
        """
        Raises:
            FileNotFoundError: If the file does not exist
            ImageDecodeError: If the file is not a readable image
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Input file not found: {self.path}")

        image = decode_image(self.path.read_bytes(), origin=str(self.path))
        return AcquiredSource(image=image, kind="file")


class StreamSource:
    def __init__(self, data: bytes | BinaryIO, name: str = "<stream>"):
        self.data: bytes | BinaryIO = data
        self.name: str = name

    def load(self) -> AcquiredSource:
        return AcquiredSource(image=decode_image(self.data, origin=self.name), kind="stream")


class RemoteImageSource:
    """Fetch an image over HTTP, falling back to a placeholder on failure.

    Transport errors and non-2xx responses are absorbed: the placeholder is
    loaded instead and the result carries ``IMAGE_NOT_FOUND`` as warning.
    A successful response that is not an image is still an error.
    """

    def __init__(
        self,
        url: str,
        placeholder_path: str | Path,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.url: str = url
        self.placeholder_path: Path = Path(placeholder_path)
        self.timeout: float = timeout
        self._client: httpx.Client | None = client

    def _fetch(self) -> bytes:
        headers = {"User-Agent": USER_AGENT}
        if self._client is not None:
            response = self._client.get(
                self.url, headers=headers, follow_redirects=True, timeout=self.timeout
            )
        else:
            with httpx.Client(follow_redirects=True, timeout=self.timeout) as client:
                response = client.get(self.url, headers=headers)

        _ = response.raise_for_status()
        return response.content

    def load(self) -> AcquiredSource:
        logger.info(f"Fetching image from {self.url}")
        try:
            content = self._fetch()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(
                f"Failed to fetch {self.url}: {exc}. Using placeholder {self.placeholder_path}"
            )
            placeholder = LocalFileSource(self.placeholder_path).load()
            return AcquiredSource(
                image=placeholder.image,
                kind="image_url",
                warning=IMAGE_NOT_FOUND,
            )

        image = decode_image(content, origin=self.url)
        return AcquiredSource(image=image, kind="image_url")


class WebsiteSnapshotSource:
    """Render a website in a headless browser and use the screenshot as source."""

    def __init__(
        self,
        url: str,
        output_width: int | None = None,
        output_height: int | None = None,
        *,
        viewport_width: int = 1024,
        viewport_height: int = 768,
        timeout: float = 20.0,
        poll_interval: float = 0.05,
        capture: CaptureFn | None = None,
    ):
        self.url: str = url
        self.viewport_width: int = viewport_width
        self.viewport_height: int = viewport_height
        self.output_width: int = output_width or viewport_width
        self.output_height: int = output_height or viewport_height
        self.timeout: float = timeout
        self.poll_interval: float = poll_interval
        self._capture: CaptureFn = capture or capture_website_thumbnail

    def load(self) -> AcquiredSource:
        image = self._capture(
            self.url,
            self.viewport_width,
            self.viewport_height,
            self.output_width,
            self.output_height,
            timeout=self.timeout,
            poll_interval=self.poll_interval,
        )
        return AcquiredSource(image=image, kind="website")
