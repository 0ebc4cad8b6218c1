import asyncio
from collections.abc import Awaitable, Callable
from typing import Optional

from tg_scrape.feed.base import FeedContainer
from tg_scrape.types.errors import AdvanceError
from tg_scrape.utils.logger import logger

Sleep = Callable[[float], Awaitable[None]]


async def advance_feed(
    container: FeedContainer,
    settle_ms: int,
    on_error: Optional[Callable[[Exception], None]] = None,
    sleep: Sleep = asyncio.sleep,
) -> bool:
    """Ask the feed for older messages by scrolling the container to its top.

    Args:
        container: The feed container
        settle_ms: Time the host UI gets to render after the scroll
        on_error: Called with an ``AdvanceError`` when the attempt fails
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        True if the scrollable height grew, meaning older messages arrived.
        False when the feed is exhausted, the container is gone, or anything
        failed; the caller treats all of these as the end of the feed.
    """
    try:
        if not await container.is_present():
            logger.warning("Feed container disappeared, treating as end of feed")
            return False

        previous_height = await container.scroll_height()
        await container.scroll_to_top()
        await sleep(settle_ms / 1000)
        current_height = await container.scroll_height()
    except Exception as e:
        error = AdvanceError(f"Failed to load older messages: {e}")
        logger.exception("Advance failed", error)
        if on_error:
            on_error(error)
        return False

    if current_height > previous_height:
        logger.debug(f"Feed grew from {previous_height}px to {current_height}px")
        return True

    logger.debug(f"Feed height unchanged at {current_height}px")
    return False
