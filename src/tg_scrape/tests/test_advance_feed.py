import asyncio

from conftest import ScriptedFeed, no_sleep

from tg_scrape.extract.advance_feed import advance_feed
from tg_scrape.feed.soup_feed import SoupFeedContainer
from tg_scrape.types.errors import AdvanceError
from tg_scrape.types.scrape_config import DEFAULT_CONTAINER_SELECTOR


def test_true_when_older_messages_load():
    feed = ScriptedFeed([[3, 4], [1, 2]])
    assert asyncio.run(advance_feed(feed, 0, sleep=no_sleep)) is True
    assert feed.scroll_top_calls == 1


def test_false_when_height_is_stable():
    feed = ScriptedFeed([[1, 2]])
    assert asyncio.run(advance_feed(feed, 0, sleep=no_sleep)) is False


def test_waits_settle_time_between_measurements():
    waits: list[float] = []

    async def recording_sleep(seconds: float) -> None:
        waits.append(seconds)

    feed = ScriptedFeed([[3, 4], [1, 2]])
    asyncio.run(advance_feed(feed, 250, sleep=recording_sleep))
    assert waits == [0.25]


def test_missing_container_is_end_of_feed():
    container = SoupFeedContainer("<main></main>", DEFAULT_CONTAINER_SELECTOR)
    errors: list[Exception] = []
    result = asyncio.run(advance_feed(container, 0, on_error=errors.append, sleep=no_sleep))
    assert result is False
    assert errors == []
    assert container.scroll_top_calls == 0


class VanishingFeed(ScriptedFeed):
    """The chat is closed while older messages are loading."""

    async def scroll_to_top(self) -> None:
        await super().scroll_to_top()
        self.update("<main>Select a chat to start messaging</main>")


def test_failure_is_reported_and_treated_as_end():
    feed = VanishingFeed([[3, 4], [1, 2]])
    errors: list[Exception] = []
    result = asyncio.run(advance_feed(feed, 0, on_error=errors.append, sleep=no_sleep))

    assert result is False
    assert len(errors) == 1
    assert isinstance(errors[0], AdvanceError)
