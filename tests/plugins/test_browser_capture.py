"""Unit tests for the website capture bridge."""

import asyncio
import time
from io import BytesIO

import pytest
from PIL import Image

from cl_thumbnailer.errors import CaptureFailed
from cl_thumbnailer.plugins.website_thumbnail.algo.browser_capture import (
    capture_website,
    capture_website_thumbnail,
)


@pytest.mark.asyncio
async def test_capture_website_loaded_page(surface_factory):
    image = await capture_website(
        "https://example.test",
        1024,
        768,
        320,
        240,
        timeout=5.0,
        poll_interval=0.01,
        surface_factory=surface_factory,
    )

    assert isinstance(image, Image.Image)
    assert image.size == (320, 240)

    surface = surface_factory.surfaces[0]
    assert surface.url == "https://example.test"
    assert surface.entered and surface.closed
    assert surface.snapshots == 1


@pytest.mark.asyncio
async def test_capture_website_keeps_viewport_aspect(surface_factory):
    image = await capture_website(
        "https://example.test",
        800,
        600,
        400,
        400,
        surface_factory=surface_factory,
    )

    assert image.size == (400, 300)


@pytest.mark.asyncio
async def test_capture_website_never_enlarges(surface_factory):
    image = await capture_website(
        "https://example.test",
        200,
        100,
        1000,
        1000,
        surface_factory=surface_factory,
    )

    assert image.size == (200, 100)


@pytest.mark.asyncio
async def test_capture_website_times_out_with_partial_snapshot(surface_factory):
    surface_factory.load_after = None  # page never finishes loading

    timeout = 0.2
    poll_interval = 0.02
    start = time.monotonic()

    image = await capture_website(
        "https://slow.test",
        640,
        480,
        640,
        480,
        timeout=timeout,
        poll_interval=poll_interval,
        surface_factory=surface_factory,
    )

    elapsed = time.monotonic() - start
    assert image.size == (640, 480)
    assert surface_factory.surfaces[0].snapshots == 1
    assert elapsed >= timeout
    # Generous bound for slow CI machines; the loop itself stops at the deadline
    assert elapsed < timeout + poll_interval + 1.0


@pytest.mark.asyncio
async def test_capture_website_waits_for_load(surface_factory):
    surface_factory.load_after = 0.1

    start = time.monotonic()
    _ = await capture_website(
        "https://example.test",
        100,
        100,
        100,
        100,
        timeout=5.0,
        poll_interval=0.01,
        surface_factory=surface_factory,
    )

    elapsed = time.monotonic() - start
    assert 0.1 <= elapsed < 5.0


@pytest.mark.asyncio
async def test_capture_website_unreadable_snapshot():
    class BrokenSurface:
        loaded = True

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

        async def navigate(self, url: str) -> None:
            return None

        async def snapshot(self) -> bytes:
            return b"not a png"

    with pytest.raises(CaptureFailed):
        _ = await capture_website(
            "https://example.test",
            100,
            100,
            100,
            100,
            surface_factory=lambda w, h: BrokenSurface(),
        )


def test_capture_website_thumbnail_sync(surface_factory):
    image = capture_website_thumbnail(
        "https://example.test",
        1024,
        768,
        512,
        384,
        surface_factory=surface_factory,
    )

    assert image.size == (512, 384)


@pytest.mark.asyncio
async def test_capture_website_thumbnail_from_running_loop(surface_factory):
    """The sync bridge uses its own thread and loop, so it works inside a loop too."""
    image = capture_website_thumbnail(
        "https://example.test",
        300,
        300,
        100,
        100,
        surface_factory=surface_factory,
    )

    assert image.size == (100, 100)


class HangingSurface:
    """Surface whose start-up or teardown never completes."""

    def __init__(self, *, hang_on_enter: bool = False, hang_on_exit: bool = False):
        self.hang_on_enter = hang_on_enter
        self.hang_on_exit = hang_on_exit
        self.loaded = True

    async def __aenter__(self):
        if self.hang_on_enter:
            await asyncio.Event().wait()
        return self

    async def __aexit__(self, *exc_info):
        if self.hang_on_exit:
            await asyncio.Event().wait()

    async def navigate(self, url: str) -> None:
        return None

    async def snapshot(self) -> bytes:
        buffer = BytesIO()
        Image.new("RGB", (100, 100)).save(buffer, "PNG")
        return buffer.getvalue()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("hang_on_enter", "hang_on_exit"), [(True, False), (False, True)]
)
async def test_capture_website_bounds_browser_lifecycle(hang_on_enter: bool, hang_on_exit: bool):
    surface = HangingSurface(hang_on_enter=hang_on_enter, hang_on_exit=hang_on_exit)
    start = time.monotonic()

    with pytest.raises(CaptureFailed):
        _ = await capture_website(
            "https://example.test",
            100,
            100,
            100,
            100,
            timeout=0.1,
            poll_interval=0.01,
            lifecycle_timeout=0.2,
            surface_factory=lambda w, h: surface,
        )

    assert time.monotonic() - start < 0.3 + 1.0


def test_capture_website_thumbnail_bounds_hung_teardown():
    start = time.monotonic()

    with pytest.raises(CaptureFailed):
        _ = capture_website_thumbnail(
            "https://example.test",
            100,
            100,
            100,
            100,
            timeout=0.1,
            poll_interval=0.01,
            lifecycle_timeout=0.2,
            surface_factory=lambda w, h: HangingSurface(hang_on_exit=True),
        )

    assert time.monotonic() - start < 0.3 + 1.0


@pytest.mark.requires_browser
def test_capture_real_browser_blank_page():
    image = capture_website_thumbnail("about:blank", 640, 480, 320, 240, timeout=10.0)

    assert image.size == (320, 240)
