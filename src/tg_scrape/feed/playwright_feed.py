from typing import Optional

from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError
from rich.markup import escape

from tg_scrape.types.errors import FeedUnavailableError
from tg_scrape.utils.logger import logger

RESOURCE_URL_SCRIPT = "el => el.src || el.href || ''"
SCROLL_HEIGHT_SCRIPT = "el => el.scrollHeight"
SCROLL_TO_TOP_SCRIPT = "el => { el.scrollTop = 0; }"


class PlaywrightFeedElement:
    """FeedElement backed by a live Playwright element handle."""

    def __init__(self, handle: ElementHandle):
        self._handle = handle

    async def attribute(self, name: str) -> Optional[str]:
        return await self._handle.get_attribute(name)

    async def text(self) -> str:
        return await self._handle.inner_text()

    async def select_one(self, selector: str) -> Optional["PlaywrightFeedElement"]:
        handle = await self._handle.query_selector(selector)
        return PlaywrightFeedElement(handle) if handle else None

    async def select_all(self, selector: str) -> list["PlaywrightFeedElement"]:
        handles = await self._handle.query_selector_all(selector)
        return [PlaywrightFeedElement(handle) for handle in handles]

    async def resource_url(self) -> str:
        # Properties, not attributes: the browser resolves them to absolute URLs
        value = await self._handle.evaluate(RESOURCE_URL_SCRIPT)
        return value if isinstance(value, str) else ""


class PlaywrightFeedContainer:
    """FeedContainer for the message list of a live page.

    The container element is looked up again on every call, so a chat
    closed mid-session surfaces as ``FeedUnavailableError`` instead of a
    stale handle.
    """

    def __init__(self, page: Page, selector: str):
        self._page = page
        self._selector = selector

    async def _element(self) -> ElementHandle:
        handle = await self._page.query_selector(self._selector)
        if handle is None:
            raise FeedUnavailableError(f"Feed container not found: '{self._selector}'")
        return handle

    async def is_present(self) -> bool:
        try:
            return await self._page.query_selector(self._selector) is not None
        except PlaywrightError as e:
            logger.exception("Feed container lookup failed", e)
            return False

    async def select_all(self, selector: str) -> list[PlaywrightFeedElement]:
        element = await self._element()
        handles = await element.query_selector_all(selector)
        return [PlaywrightFeedElement(handle) for handle in handles]

    async def scroll_height(self) -> int:
        element = await self._element()
        return int(await element.evaluate(SCROLL_HEIGHT_SCRIPT))

    async def scroll_to_top(self) -> None:
        element = await self._element()
        await element.evaluate(SCROLL_TO_TOP_SCRIPT)


async def find_feed_container(page: Page, selector: str) -> Optional[PlaywrightFeedContainer]:
    """Resolve the feed container of the open chat, or None if no chat is open."""
    try:
        containers = await page.query_selector_all(selector)
    except PlaywrightError as e:
        logger.exception("Error looking up feed container", e)
        return None

    if not containers:
        logger.warning(f"No feed container found with selector: '{escape(selector)}'")
        return None

    logger.debug(f"Found {len(containers)} feed container(s) on {escape(page.url)}")
    return PlaywrightFeedContainer(page, selector)
