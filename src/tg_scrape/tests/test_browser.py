import asyncio
from pathlib import Path

from tg_scrape import browser
from tg_scrape.browser import FeedBrowser
from tg_scrape.types.scrape_config import ScrapeConfig


class FakeBrowserPage:
    def __init__(self):
        self.url = "about:blank"

    def is_closed(self) -> bool:
        return False

    async def goto(self, url: str, wait_until: str = "load"):
        await asyncio.sleep(0)
        self.url = url


class FakeContext:
    def __init__(self):
        self.pages = [FakeBrowserPage()]


class FakeChromium:
    def __init__(self):
        self.launches: list[str] = []

    async def launch_persistent_context(self, user_data_dir: str, headless: bool = False):
        await asyncio.sleep(0)
        self.launches.append(user_data_dir)
        return FakeContext()


class FakePlaywright:
    def __init__(self):
        self.chromium = FakeChromium()


class FakePlaywrightManager:
    def __init__(self):
        self.starts = 0
        self.playwright = FakePlaywright()

    def __call__(self):
        return self

    async def start(self) -> FakePlaywright:
        await asyncio.sleep(0)
        self.starts += 1
        return self.playwright


def test_concurrent_open_launches_once(monkeypatch, tmp_path: Path):
    manager = FakePlaywrightManager()

    async def no_debug_port(port: int) -> bool:
        return False

    monkeypatch.setattr(browser, "async_playwright", manager)
    monkeypatch.setattr(browser, "is_debug_port_active", no_debug_port)
    monkeypatch.setattr(browser, "get_browser_profile_dir", lambda: tmp_path)

    feed_browser = FeedBrowser(ScrapeConfig())

    async def scenario():
        return await asyncio.gather(feed_browser.open(), feed_browser.open())

    first, second = asyncio.run(scenario())

    assert first is second
    assert manager.starts == 1
    assert manager.playwright.chromium.launches == [str(tmp_path)]
    assert first.url == ScrapeConfig().feed_url
