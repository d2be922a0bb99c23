"""Playwright (headless Chromium) implementation of a rendering surface."""

import asyncio
from types import TracebackType

from loguru import logger
from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError

from ....errors import CaptureFailed

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)

SNAPSHOT_TIMEOUT_MS = 10_000


class PlaywrightSurface:
    """A single Chromium page with a fixed viewport.

    ``loaded`` flips to True when the first navigation settles (the page's
    load event, or a navigation error page). Later in-page navigations do
    not affect it, and popups are closed as soon as they open.
    """

    def __init__(
        self,
        viewport_width: int,
        viewport_height: int,
        *,
        user_agent: str = USER_AGENT,
    ):
        self.viewport_width: int = viewport_width
        self.viewport_height: int = viewport_height
        self.user_agent: str = user_agent

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._navigation: asyncio.Task[None] | None = None

    @property
    def loaded(self) -> bool:
        return self._navigation is not None and self._navigation.done()

    async def __aenter__(self) -> "PlaywrightSurface":
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=True)
            self._context = await self._browser.new_context(
                viewport={"width": self.viewport_width, "height": self.viewport_height},
                user_agent=self.user_agent,
            )
            self._page = await self._context.new_page()
        except PlaywrightError as exc:
            await self._shutdown()
            raise CaptureFailed(f"Failed to start headless browser: {exc}") from exc

        self._page.on("popup", self._reject_popup)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self._shutdown()

    async def navigate(self, url: str) -> None:
        if self._page is None:
            raise CaptureFailed("Surface used outside of its context")
        self._navigation = asyncio.create_task(self._goto(self._page, url))

    async def _goto(self, page: Page, url: str) -> None:
        try:
            # No navigation timeout here; the capture loop owns the deadline
            _ = await page.goto(url, wait_until="load", timeout=0)
        except PlaywrightError as exc:
            logger.warning(f"Navigation to {url} failed: {exc}")

    async def _reject_popup(self, popup: Page) -> None:
        logger.debug(f"Closing popup {popup.url}")
        await popup.close()

    async def snapshot(self) -> bytes:
        if self._page is None:
            raise CaptureFailed("Surface used outside of its context")
        try:
            return await self._page.screenshot(
                type="png",
                clip={
                    "x": 0,
                    "y": 0,
                    "width": self.viewport_width,
                    "height": self.viewport_height,
                },
                timeout=SNAPSHOT_TIMEOUT_MS,
            )
        except PlaywrightError as exc:
            raise CaptureFailed(f"Failed to snapshot page: {exc}") from exc

    async def _shutdown(self) -> None:
        if self._navigation is not None and not self._navigation.done():
            _ = self._navigation.cancel()
            # gather still propagates cancellation of this task itself
            _ = await asyncio.gather(self._navigation, return_exceptions=True)

        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        except PlaywrightError as exc:
            logger.warning(f"Error while closing headless browser: {exc}")
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self._page = None
            self._context = None
            self._browser = None
            self._playwright = None
