"""Playwright-backed fetcher for section pages that need client-side rendering."""

import asyncio
import logging

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from academy_scraper.config import FetcherConfig
from academy_scraper.fetcher.base import BaseFetcher, FetchResult

logger = logging.getLogger(__name__)

BLANK_PAGE = "about:blank"
WAIT_SELECTOR_TIMEOUT_MS = 10_000


async def _close_quietly(page: Page) -> None:
    try:
        await page.close()
    except Exception:
        logger.debug("Ignoring error while closing page", exc_info=True)


class PlaywrightFetcher(BaseFetcher):
    """Render pages in headless Chromium.

    A small pool of pages is opened up front. The session cookie travels as
    an extra request header on each navigation, so one browser context can
    serve any credential.
    """

    def __init__(self, config: FetcherConfig):
        super().__init__(config)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._pages: asyncio.Queue[Page] | None = None

    async def __aenter__(self):
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=True)
            self._context = await self._browser.new_context(user_agent=self.config.user_agent)
            self._pages = asyncio.Queue()
            for _ in range(self.config.page_pool_size):
                await self._pages.put(await self._context.new_page())
        except Exception:
            await self.__aexit__(None, None, None)
            raise
        logger.debug("Browser ready with %d pooled pages", self.config.page_pool_size)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._pages is not None:
            while not self._pages.empty():
                await _close_quietly(self._pages.get_nowait())
        for resource in (self._context, self._browser):
            if resource is not None:
                await resource.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._pages = self._context = self._browser = self._playwright = None

    async def fetch(self, url: str, credential: str) -> FetchResult:
        if self._pages is None or self._context is None:
            raise RuntimeError("Fetcher not initialized. Use 'async with' context manager.")

        page = await self._pages.get()
        try:
            return await self._render(page, url, credential)
        except Exception as e:
            return FetchResult(url=url, final_url=url, html="", status_code=0, error=str(e))
        finally:
            await self._recycle(page)

    async def _render(self, page: Page, url: str, credential: str) -> FetchResult:
        await page.set_extra_http_headers({"Cookie": credential, "Accept": self.config.accept})
        response = await page.goto(url, wait_until="networkidle", timeout=self.config.timeout_ms)
        if response is None:
            return FetchResult(
                url=url, final_url=url, html="", status_code=0, error="No response received"
            )

        if self.config.wait_selector:
            try:
                await page.wait_for_selector(
                    self.config.wait_selector, timeout=WAIT_SELECTOR_TIMEOUT_MS
                )
            except Exception:
                # Extraction reports the missing region
                logger.debug("%s never appeared on %s", self.config.wait_selector, url)

        return FetchResult(
            url=url,
            final_url=page.url,
            html=await page.content(),
            status_code=response.status,
        )

    async def _recycle(self, page: Page) -> None:
        """Blank the page and put it back, swapping in a new one if it is unusable."""
        if self._pages is None or self._context is None:
            raise RuntimeError("Fetcher closed while a page was in use")
        try:
            await page.goto(BLANK_PAGE, wait_until="load", timeout=5000)
        except Exception:
            logger.debug("Replacing page that failed to reset", exc_info=True)
            await _close_quietly(page)
            page = await self._context.new_page()
        await self._pages.put(page)
