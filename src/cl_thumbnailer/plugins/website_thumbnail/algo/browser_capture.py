"""Website thumbnail capture with a hard wall-clock deadline.

The browser runs on a private event loop in a worker thread. Navigation
is started without waiting for it; the loop then polls the surface until
the page reports the first load of the navigated URL or the deadline
passes, and snapshots the viewport either way.
"""

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from types import TracebackType
from typing import Protocol

from loguru import logger
from PIL import Image, UnidentifiedImageError

from ....errors import CaptureFailed
from ....utils.profiling import timed
from .playwright_surface import PlaywrightSurface

CAPTURE_TIMEOUT = 20.0
POLL_INTERVAL = 0.05
SNAPSHOT_TIMEOUT = 10.0
# Start-up, snapshot and teardown budget on top of the page load timeout
LIFECYCLE_TIMEOUT = 25.0
WORKER_GRACE = 2.0


class RenderingSurface(Protocol):
    """A headless page of fixed viewport size that can be snapshotted."""

    @property
    def loaded(self) -> bool:
        """True once the first navigation to the requested URL has completed."""
        ...

    async def __aenter__(self) -> "RenderingSurface": ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    async def navigate(self, url: str) -> None:
        """Start navigating to url without waiting for the load to finish."""
        ...

    async def snapshot(self) -> bytes:
        """PNG of the viewport as currently rendered."""
        ...


SurfaceFactory = Callable[[int, int], RenderingSurface]


def _playwright_surface(viewport_width: int, viewport_height: int) -> RenderingSurface:
    return PlaywrightSurface(viewport_width, viewport_height)


def _to_thumbnail(
    png: bytes,
    viewport_width: int,
    viewport_height: int,
    output_width: int,
    output_height: int,
) -> Image.Image:
    try:
        snapshot = Image.open(BytesIO(png))
        snapshot.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise CaptureFailed(f"Browser returned an unreadable snapshot: {exc}") from exc

    if snapshot.size != (viewport_width, viewport_height):
        cropped = snapshot.crop((0, 0, viewport_width, viewport_height))
        snapshot.close()
        snapshot = cropped

    snapshot.thumbnail((max(1, output_width), max(1, output_height)), Image.Resampling.LANCZOS)
    return snapshot


@timed
async def capture_website(
    url: str,
    viewport_width: int,
    viewport_height: int,
    output_width: int,
    output_height: int,
    *,
    timeout: float = CAPTURE_TIMEOUT,
    poll_interval: float = POLL_INTERVAL,
    lifecycle_timeout: float = LIFECYCLE_TIMEOUT,
    surface_factory: SurfaceFactory | None = None,
) -> Image.Image:
    """
    Render url and return a viewport snapshot scaled to fit the output size.

    Args:
        url: Website to render
        viewport_width: Browser viewport width in pixels
        viewport_height: Browser viewport height in pixels
        output_width: Maximum width of the returned image
        output_height: Maximum height of the returned image
        timeout: Seconds to wait for the page load before snapshotting anyway
        poll_interval: Seconds between load checks
        lifecycle_timeout: Extra seconds allowed on top of timeout for browser
                           start-up, snapshot and teardown
        surface_factory: Builds the rendering surface (defaults to Playwright)

    Returns:
        Snapshot image, aspect ratio of the viewport preserved

    Raises:
        CaptureFailed: If the browser cannot start or produce a snapshot, or
                       the capture as a whole exceeds timeout + lifecycle_timeout
    """
    factory = surface_factory or _playwright_surface
    loop = asyncio.get_running_loop()

    logger.info(f"Capturing {url} at {viewport_width}x{viewport_height}")

    try:
        async with asyncio.timeout(timeout + lifecycle_timeout):
            deadline = loop.time() + timeout
            async with factory(viewport_width, viewport_height) as surface:
                await surface.navigate(url)

                while not surface.loaded:
                    if loop.time() >= deadline:
                        logger.warning(
                            f"{url} did not finish loading within {timeout:.1f}s, "
                            + "capturing partial render"
                        )
                        break
                    await asyncio.sleep(poll_interval)

                try:
                    png = await asyncio.wait_for(surface.snapshot(), timeout=SNAPSHOT_TIMEOUT)
                except TimeoutError as exc:
                    raise CaptureFailed(f"Snapshot of {url} timed out") from exc
    except TimeoutError as exc:
        raise CaptureFailed(
            f"Capture of {url} exceeded {timeout + lifecycle_timeout:.1f}s"
        ) from exc

    return _to_thumbnail(png, viewport_width, viewport_height, output_width, output_height)


def capture_website_thumbnail(
    url: str,
    viewport_width: int,
    viewport_height: int,
    output_width: int,
    output_height: int,
    *,
    timeout: float = CAPTURE_TIMEOUT,
    poll_interval: float = POLL_INTERVAL,
    lifecycle_timeout: float = LIFECYCLE_TIMEOUT,
    surface_factory: SurfaceFactory | None = None,
) -> Image.Image:
    """Synchronous entry point for capture_website.

    Runs the capture on its own event loop in a dedicated thread, so it can
    be called from sync code and from threads that already run a loop. The
    caller waits at most timeout + lifecycle_timeout (plus a short grace
    period for the worker loop to unwind).
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="website-capture")
    try:
        future = executor.submit(
            asyncio.run,
            capture_website(
                url,
                viewport_width,
                viewport_height,
                output_width,
                output_height,
                timeout=timeout,
                poll_interval=poll_interval,
                lifecycle_timeout=lifecycle_timeout,
                surface_factory=surface_factory,
            ),
        )
        try:
            return future.result(timeout=timeout + lifecycle_timeout + WORKER_GRACE)
        except TimeoutError as exc:
            raise CaptureFailed(f"Capture worker for {url} did not finish in time") from exc
    finally:
        # A worker stuck past its own deadline is abandoned rather than joined
        executor.shutdown(wait=False, cancel_futures=True)
