from typing import Optional, Protocol


class FeedElement(Protocol):
    """A rendered element of the host page, seen read-only."""

    async def attribute(self, name: str) -> Optional[str]: ...

    async def text(self) -> str:
        """Visible text of the element."""
        ...

    async def select_one(self, selector: str) -> Optional["FeedElement"]: ...

    async def select_all(self, selector: str) -> list["FeedElement"]: ...

    async def resource_url(self) -> str:
        """Resolved ``src`` (images, video) or ``href`` (links), empty if neither."""
        ...


class FeedContainer(Protocol):
    """The scrollable, externally mutated region holding the visible entries.

    Operations other than ``is_present`` raise ``FeedUnavailableError`` once
    the container element has left the page.
    """

    async def is_present(self) -> bool: ...

    async def select_all(self, selector: str) -> list[FeedElement]: ...

    async def scroll_height(self) -> int: ...

    async def scroll_to_top(self) -> None: ...
