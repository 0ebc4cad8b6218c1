"""
Opens the Telegram Web page the scraper works on.

Reuses a Chrome already running with a remote debugging port when there is
one (so the user's logged-in session is used as-is). Otherwise launches a
Playwright Chromium with a persistent profile in the config directory, so the
Telegram login only has to happen once.
"""

import asyncio
from typing import Optional

import aiohttp
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from rich.markup import escape

from tg_scrape.feed.playwright_feed import PlaywrightFeedContainer, find_feed_container
from tg_scrape.types.scrape_config import ScrapeConfig
from tg_scrape.utils.config_dir import get_browser_profile_dir
from tg_scrape.utils.logger import logger

# Timeout for probing the Chrome debug port (seconds)
CDP_PROBE_TIMEOUT = 1.0


async def is_debug_port_active(port: int) -> bool:
    """Check whether a Chrome instance answers on the DevTools HTTP endpoint."""
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                f"http://localhost:{port}/json/version",
                timeout=aiohttp.ClientTimeout(total=CDP_PROBE_TIMEOUT),
            ) as response:
                return response.status == 200
    except (aiohttp.ClientError, TimeoutError) as e:
        logger.debug(f"Chrome debug port {port} not reachable: {escape(str(e))}")
        return False


class FeedBrowser:
    """Owns the Playwright objects behind the feed page."""

    def __init__(self, config: ScrapeConfig):
        self._config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._open_lock = asyncio.Lock()

    @property
    def page(self) -> Optional[Page]:
        return self._page

    async def open(self) -> Page:
        """Connect or launch, then return the page showing the feed.

        Calls are serialized: the app opens the browser on mount while a
        Start press may already be resolving the container.
        """
        async with self._open_lock:
            if self._page and not self._page.is_closed():
                return self._page

            if self._playwright is None:
                logger.debug("Starting async Playwright instance")
                self._playwright = await async_playwright().start()

            if await is_debug_port_active(self._config.cdp_port):
                self._page = await self._open_over_cdp(self._playwright)
            else:
                self._page = await self._launch_persistent(self._playwright)
            return self._page

    async def _open_over_cdp(self, playwright: Playwright) -> Page:
        self._browser = await playwright.chromium.connect_over_cdp(
            f"http://localhost:{self._config.cdp_port}"
        )
        logger.success(f"Connected to Chrome on port {self._config.cdp_port}")

        contexts = self._browser.contexts
        context = contexts[0] if contexts else await self._browser.new_context()
        self._context = context

        for page in context.pages:
            if page.url.startswith(self._config.feed_url):
                logger.debug(f"Reusing open tab: {escape(page.url)}")
                return page

        page = await context.new_page()
        await page.goto(self._config.feed_url, wait_until="domcontentloaded")
        return page

    async def _launch_persistent(self, playwright: Playwright) -> Page:
        profile_dir = get_browser_profile_dir()
        logger.debug(f"Launching Chromium with profile {escape(str(profile_dir))}")
        self._context = await playwright.chromium.launch_persistent_context(
            str(profile_dir),
            headless=self._config.headless,
        )
        page = self._context.pages[0] if self._context.pages else await self._context.new_page()
        await page.goto(self._config.feed_url, wait_until="domcontentloaded")
        return page

    async def resolve_container(self) -> Optional[PlaywrightFeedContainer]:
        """Feed container of the chat currently open in the page, if any."""
        try:
            page = await self.open()
        except PlaywrightError as e:
            logger.exception("Could not open the browser", e)
            return None
        return await find_feed_container(page, self._config.container_selector)

    async def close(self) -> None:
        # A browser reached over CDP belongs to the user: disconnect, don't quit it
        try:
            if self._browser is not None:
                await self._browser.close()
            elif self._context is not None:
                await self._context.close()
        except PlaywrightError as e:
            logger.exception("Error closing browser", e)
        finally:
            self._browser = None
            self._context = None
            self._page = None

        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
