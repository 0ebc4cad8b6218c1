from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from tg_scrape.types.errors import FeedUnavailableError


def _attribute_value(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if value is None:
        return None
    # bs4 returns multi-valued attributes (class, rel) as lists
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


class SoupFeedElement:
    """FeedElement over a parsed HTML tag."""

    def __init__(self, tag: Tag, base_url: str = ""):
        self._tag = tag
        self._base_url = base_url

    async def attribute(self, name: str) -> Optional[str]:
        return _attribute_value(self._tag, name)

    async def text(self) -> str:
        return self._tag.get_text(" ", strip=True)

    async def select_one(self, selector: str) -> Optional["SoupFeedElement"]:
        tag = self._tag.select_one(selector)
        return SoupFeedElement(tag, self._base_url) if tag else None

    async def select_all(self, selector: str) -> list["SoupFeedElement"]:
        return [SoupFeedElement(tag, self._base_url) for tag in self._tag.select(selector)]

    async def resource_url(self) -> str:
        value = _attribute_value(self._tag, "src") or _attribute_value(self._tag, "href")
        if not value:
            return ""
        # blob: locators stay as-is so they can be recognised and dropped
        if self._base_url and not value.startswith("blob:"):
            return urljoin(self._base_url, value)
        return value


class SoupFeedContainer:
    """FeedContainer over a saved HTML snapshot.

    A snapshot does not load older content by itself: ``scroll_to_top`` is a
    no-op and ``scroll_height`` only changes when ``update()`` swaps in a new
    document.
    """

    def __init__(
        self,
        html: str,
        container_selector: Optional[str] = None,
        base_url: str = "",
    ):
        self._container_selector = container_selector
        self._base_url = base_url
        self.scroll_top_calls = 0
        self.update(html)

    def update(self, html: str) -> None:
        """Replace the rendered document, as the host UI would after a load."""
        self._soup = BeautifulSoup(html, "html.parser")
        self._height = len(html)

    def _root(self) -> Optional[Tag]:
        if not self._container_selector:
            return self._soup
        return self._soup.select_one(self._container_selector)

    def _require_root(self) -> Tag:
        root = self._root()
        if root is None:
            raise FeedUnavailableError(
                f"Feed container not found: '{self._container_selector}'"
            )
        return root

    async def is_present(self) -> bool:
        return self._root() is not None

    async def select_all(self, selector: str) -> list[SoupFeedElement]:
        root = self._require_root()
        return [SoupFeedElement(tag, self._base_url) for tag in root.select(selector)]

    async def scroll_height(self) -> int:
        self._require_root()
        return self._height

    async def scroll_to_top(self) -> None:
        self._require_root()
        self.scroll_top_calls += 1
