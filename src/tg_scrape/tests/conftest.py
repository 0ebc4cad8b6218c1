from pathlib import Path

import pytest

from tg_scrape.feed.soup_feed import SoupFeedContainer
from tg_scrape.types.scrape_config import DEFAULT_CONTAINER_SELECTOR, ScrapeConfig

# Height the scripted feed grows by for every page of older messages
PAGE_HEIGHT = 1000


def message_html(message_id: int) -> str:
    return (
        f'<div data-testid="message" data-id="{message_id}">'
        f'<span data-testid="message-author">user{message_id % 3}</span>'
        f'<div data-testid="message-text">message {message_id}</div>'
        f'<time datetime="2024-01-01T00:00:{message_id:02d}Z">00:{message_id:02d}</time>'
        "</div>"
    )


def render_feed(message_ids: list[int]) -> str:
    """Render messages top to bottom in the given (chronological) order."""
    body = "".join(message_html(message_id) for message_id in message_ids)
    return f'<div aria-label="Message list">{body}</div>'


class ScriptedFeed(SoupFeedContainer):
    """Feed that renders one more page of older messages per scroll to top.

    ``pages`` are given newest first, each page in chronological order.
    Once every page is shown, the next scroll renders ``boundary_ids``
    without growing the height, like a last batch appearing right at the
    end of the history.
    """

    def __init__(self, pages: list[list[int]], boundary_ids: list[int] | None = None):
        self.pages = pages
        self.revealed = 1
        self.boundary_ids = boundary_ids or []
        self.boundary_rendered = False
        super().__init__(self.render(), container_selector=DEFAULT_CONTAINER_SELECTOR)

    def render(self) -> str:
        ids = list(self.boundary_ids) if self.boundary_rendered else []
        for page in reversed(self.pages[: self.revealed]):
            ids.extend(page)
        return render_feed(ids)

    async def scroll_height(self) -> int:
        await super().scroll_height()
        return self.revealed * PAGE_HEIGHT

    async def scroll_to_top(self) -> None:
        await super().scroll_to_top()
        if self.revealed < len(self.pages):
            self.revealed += 1
        else:
            self.boundary_rendered = True
        self.update(self.render())


class RecordingObserver:
    def __init__(self):
        self.progress: list[int] = []
        self.summaries: list[int] = []
        self.errors: list[str] = []

    def progress_update(self, count: int) -> None:
        self.progress.append(count)

    def terminal_summary(self, count: int) -> None:
        self.summaries.append(count)

    def error_notice(self, message: str) -> None:
        self.errors.append(message)


def resolver_for(container):
    async def resolve():
        return container

    return resolve


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "html_fixtures"


@pytest.fixture
def channel_html(fixtures_dir: Path) -> str:
    fixture_path = fixtures_dir / "telegram_channel.html"
    assert fixture_path.exists(), f"Fixture not found at {fixture_path}"
    return fixture_path.read_text(encoding="utf-8")


@pytest.fixture
def config(tmp_path: Path) -> ScrapeConfig:
    return ScrapeConfig(delay_ms=0, settle_ms=0, export_dir=tmp_path)
