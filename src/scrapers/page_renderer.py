# src/scrapers/page_renderer.py

"""Headless Chromium page renderer (Playwright)."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from src.config.settings import Settings
from src.models.rendered_page import RenderedPage
from src.scrapers.rate_limiter import HostRateLimiter
from src.services.exceptions import PageLoadError


class PageRenderer:
    """Loads a URL in a fresh browser and yields a DOM snapshot.

    Every call launches its own browser and context so that cookies and
    cache never leak between retailers; the browser is closed on every
    exit path, including extraction errors raised inside the ``async
    with`` block.
    """

    def __init__(
        self,
        rate_limiter: HostRateLimiter | None = None,
    ) -> None:
        self.logger = logging.getLogger("price_observer.renderer")
        self.settings = Settings()
        self.rate_limiter = rate_limiter or HostRateLimiter()

    @asynccontextmanager
    async def render(self, url: str) -> AsyncIterator[RenderedPage]:
        """Render *url* to ``domcontentloaded`` and yield the snapshot.

        Raises:
            PageLoadError: on navigation timeout or browser failure.
        """
        hostname = (urlparse(url).hostname or "").lower()
        await self.rate_limiter.wait(hostname)

        async with async_playwright() as pw:
            try:
                browser = await pw.chromium.launch(
                    headless=self.settings.HEADLESS
                )
            except PlaywrightError as exc:
                raise PageLoadError(url, f"browser launch failed: {exc}") from exc

            try:
                try:
                    context = await browser.new_context(
                        user_agent=self.settings.USER_AGENT,
                        locale=self.settings.BROWSER_LOCALE,
                    )
                    page = await context.new_page()
                    await page.goto(
                        url,
                        wait_until="domcontentloaded",
                        timeout=self.settings.NAVIGATION_TIMEOUT_MS,
                    )
                    if self.settings.RENDER_SETTLE_MS:
                        await page.wait_for_timeout(
                            self.settings.RENDER_SETTLE_MS
                        )
                    html = await page.content()
                except PlaywrightTimeoutError as exc:
                    self.logger.warning(
                        "Navigation timeout after %dms: %s",
                        self.settings.NAVIGATION_TIMEOUT_MS,
                        url,
                    )
                    raise PageLoadError(url, "navigation timeout") from exc
                except PlaywrightError as exc:
                    self.logger.error(
                        "Browser error loading %s: %s", url, exc,
                        exc_info=True,
                    )
                    raise PageLoadError(url, str(exc)) from exc

                self.logger.debug(
                    "Rendered %s (%d bytes)", url, len(html),
                )
                yield RenderedPage(url=url, html=html)
            finally:
                await self._close_browser(browser, url)

    async def _close_browser(self, browser: Any, url: str) -> None:
        """Close *browser*, logging instead of masking an in-flight error."""
        try:
            await browser.close()
        except PlaywrightError as exc:
            self.logger.warning(
                "Browser close failed after %s: %s", url, exc,
            )
