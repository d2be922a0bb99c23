"""Test configuration and fixtures for cl_thumbnailer.

This module provides:
- Pytest configuration (markers, browser availability check)
- Function-scoped fixtures (synthetic images, placeholder, settings)
- Mock collaborators (HTTP transport, rendering surface)
- API client fixture for route tests
"""

import functools
import time
from collections.abc import Callable
from io import BytesIO
from pathlib import Path
from types import TracebackType

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "requires_browser: requires Playwright Chromium to be installed",
    )
    config.addinivalue_line(
        "markers",
        "integration: full request tests (HTTP route -> service -> encoder)",
    )


@functools.cache
def _chromium_installed() -> bool:
    try:
        from playwright.sync_api import sync_playwright
    except ImportError:
        return False

    try:
        with sync_playwright() as p:
            return Path(p.chromium.executable_path).exists()
    except Exception:
        return False


def pytest_runtest_setup(item):
    """Skip browser tests when Chromium is not available."""
    if item.get_closest_marker("requires_browser") and not _chromium_installed():
        pytest.skip(
            "Playwright Chromium not installed. Install: playwright install chromium",
        )


# ============================================================================
# Image Helpers
# ============================================================================


def encode_image(image: Image.Image, format: str = "PNG", **kwargs) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=format, **kwargs)
    return buffer.getvalue()


def solid_png(width: int, height: int, color=(10, 120, 200)) -> bytes:
    return encode_image(Image.new("RGB", (width, height), color), "PNG")


# ============================================================================
# Function-Scoped Fixtures (Run Per Test)
# ============================================================================


@pytest.fixture
def synthetic_image(tmp_path: Path) -> Path:
    """Generate synthetic 800x600 test image using PIL."""
    output_path = tmp_path / "synthetic.jpg"

    img = Image.new("RGB", (800, 600), color=(73, 109, 137))
    draw = ImageDraw.Draw(img)

    for i in range(0, 800, 50):
        draw.line([(i, 0), (i, 600)], fill=(255, 255, 255), width=2)
    for i in range(0, 600, 50):
        draw.line([(0, i), (800, i)], fill=(255, 255, 255), width=2)

    draw.ellipse([300, 200, 500, 400], fill=(200, 100, 100))

    img.save(output_path, "JPEG", quality=85)

    return output_path


@pytest.fixture
def synthetic_png_bytes(synthetic_image: Path) -> bytes:
    with Image.open(synthetic_image) as img:
        return encode_image(img, "PNG")


@pytest.fixture
def placeholder_path(tmp_path: Path) -> Path:
    """White 64x32 GIF standing in for the configured placeholder image."""
    path = tmp_path / "white.gif"
    Image.new("RGB", (64, 32), (255, 255, 255)).save(path, "GIF")
    return path


@pytest.fixture
def settings(placeholder_path: Path):
    from cl_thumbnailer.config import ThumbnailerSettings

    return ThumbnailerSettings(
        placeholder_path=placeholder_path,
        capture_timeout=1.0,
        capture_poll_interval=0.01,
    )


# ============================================================================
# Mock Service Fixtures
# ============================================================================


@pytest.fixture
def image_server(synthetic_png_bytes: bytes) -> Callable[[httpx.Request], httpx.Response]:
    """Request handler simulating a remote image host.

    - /photo.png    -> 800x600 PNG
    - /missing.png  -> 404
    - /broken.jpg   -> 200 with a non-image body
    - /down.gif     -> connection error
    """

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/photo.png":
            return httpx.Response(200, content=synthetic_png_bytes, headers={"content-type": "image/png"})
        if path == "/missing.png":
            return httpx.Response(404, text="Not Found")
        if path == "/broken.jpg":
            return httpx.Response(200, text="<html>definitely not a jpeg</html>")
        if path == "/down.gif":
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(404)

    return handler


@pytest.fixture
def http_client(image_server):
    client = httpx.Client(transport=httpx.MockTransport(image_server))
    yield client
    client.close()


class FakeSurface:
    """In-process stand-in for a headless browser page."""

    def __init__(
        self,
        viewport_width: int,
        viewport_height: int,
        *,
        load_after: float | None = 0.0,
        color=(30, 160, 90),
    ):
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.load_after = load_after
        self.color = color
        self.url: str | None = None
        self.entered = False
        self.closed = False
        self.snapshots = 0
        self._navigated_at: float | None = None

    @property
    def loaded(self) -> bool:
        if self._navigated_at is None or self.load_after is None:
            return False
        return time.monotonic() - self._navigated_at >= self.load_after

    async def __aenter__(self) -> "FakeSurface":
        self.entered = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.closed = True

    async def navigate(self, url: str) -> None:
        self.url = url
        self._navigated_at = time.monotonic()

    async def snapshot(self) -> bytes:
        self.snapshots += 1
        return solid_png(self.viewport_width, self.viewport_height, self.color)


@pytest.fixture
def surface_factory():
    """Factory producing FakeSurface instances; created surfaces are kept in .surfaces."""

    class Factory:
        def __init__(self):
            self.surfaces: list[FakeSurface] = []
            self.load_after: float | None = 0.0

        def __call__(self, viewport_width: int, viewport_height: int) -> FakeSurface:
            surface = FakeSurface(viewport_width, viewport_height, load_after=self.load_after)
            self.surfaces.append(surface)
            return surface

    return Factory()


@pytest.fixture
def fake_capture(surface_factory):
    """Website capture function backed by FakeSurface."""
    from cl_thumbnailer.plugins.website_thumbnail.algo.browser_capture import (
        capture_website_thumbnail,
    )

    def capture(url, viewport_width, viewport_height, output_width, output_height, **kwargs):
        return capture_website_thumbnail(
            url,
            viewport_width,
            viewport_height,
            output_width,
            output_height,
            surface_factory=surface_factory,
            **kwargs,
        )

    return capture


@pytest.fixture
def service(settings, http_client, fake_capture):
    from cl_thumbnailer.service import ThumbnailService

    return ThumbnailService(settings, http_client=http_client, capture=fake_capture)


@pytest.fixture
def response_cache():
    from cl_thumbnailer.utils.response_cache import ResponseCache

    return ResponseCache(ttl_seconds=60)


@pytest.fixture
def api_client(service, response_cache):
    """Provide FastAPI TestClient for route testing."""
    from fastapi import FastAPI

    from cl_thumbnailer import create_master_router

    app = FastAPI()
    app.include_router(create_master_router(service, response_cache))

    return TestClient(app)
