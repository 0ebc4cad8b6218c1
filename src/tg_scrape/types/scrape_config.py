import os
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from tg_scrape.utils.config_dir import get_default_export_dir

# Wait between loop iterations, user adjustable from the panel
DEFAULT_DELAY_MS = 1500
# Time the host UI gets to render older messages after a scroll to top
DEFAULT_SETTLE_MS = 100
# Scrollable message list of an open chat in Telegram Web
DEFAULT_CONTAINER_SELECTOR = 'div[aria-label="Message list"]'
DEFAULT_FEED_URL = "https://web.telegram.org/"
# Chrome must be started with --remote-debugging-port=<this> to be reused
DEFAULT_CDP_PORT = 9222
# Attached media: images, videos and links
DEFAULT_MEDIA_SELECTOR = "img, video, a"


class EntryStrategy(BaseModel):
    """One way of locating message entries inside the container."""

    name: str
    selector: str


class FieldRule(BaseModel):
    """Read a string from the first element matching ``selector``.

    With ``attribute`` set the attribute value is used, otherwise the
    element's visible text.
    """

    selector: str
    attribute: str | None = None


def default_entry_strategies() -> list[EntryStrategy]:
    return [
        EntryStrategy(name="primary", selector='div[data-testid="message"]'),
        # Some channel views render articles instead
        EntryStrategy(name="article", selector="article"),
        EntryStrategy(name="bubble", selector="div.bubble[data-mid]"),
    ]


class FieldRules(BaseModel):
    """Ordered fallbacks per record field. The first non-empty value wins."""

    sender: list[FieldRule] = Field(
        default_factory=lambda: [
            FieldRule(selector='[data-testid="message-author"]'),
            FieldRule(selector="header [dir]"),
        ]
    )
    timestamp: list[FieldRule] = Field(
        default_factory=lambda: [
            FieldRule(selector="time", attribute="datetime"),
            FieldRule(selector="time"),
        ]
    )
    text: list[FieldRule] = Field(
        default_factory=lambda: [
            FieldRule(selector='[data-testid="message-text"]'),
            FieldRule(selector='[class*="text"]'),
        ]
    )
    forwarded_from: list[FieldRule] = Field(
        default_factory=lambda: [FieldRule(selector='[data-testid="forwarded-from"]')]
    )
    reply_to: list[FieldRule] = Field(
        default_factory=lambda: [FieldRule(selector='[data-testid="reply-meta"]')]
    )


class ScrapeConfig(BaseModel):
    # Feed location
    feed_url: str = DEFAULT_FEED_URL
    container_selector: str = DEFAULT_CONTAINER_SELECTOR

    # Entry discovery, tried in order until one yields entries
    entry_strategies: list[EntryStrategy] = Field(default_factory=default_entry_strategies)
    # Explicit id attributes first, then the element's own id
    id_attributes: list[str] = Field(
        default_factory=lambda: ["data-id", "id", "data-message-id", "data-mid"]
    )
    field_rules: FieldRules = Field(default_factory=FieldRules)
    media_selector: str = DEFAULT_MEDIA_SELECTOR

    # Timing (in milliseconds)
    delay_ms: int = DEFAULT_DELAY_MS
    settle_ms: int = DEFAULT_SETTLE_MS

    # Browser
    cdp_port: int = DEFAULT_CDP_PORT
    headless: bool = False

    # Where export buttons write files
    export_dir: Path = Field(default_factory=get_default_export_dir)


def _parse_non_negative_int(value: Any, default: int) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 0 else default


def parse_delay_ms(value: Any, default: int = DEFAULT_DELAY_MS) -> int:
    """Parse a user supplied delay, falling back to ``default`` on bad input."""
    return _parse_non_negative_int(value, default)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_scrape_config(**overrides: Any) -> ScrapeConfig:
    """Build a config from TG_SCRAPE_* environment variables (and a .env file)."""
    load_dotenv(find_dotenv(usecwd=True))

    values: dict[str, Any] = {}
    if delay := os.getenv("TG_SCRAPE_DELAY_MS"):
        values["delay_ms"] = parse_delay_ms(delay)
    if settle := os.getenv("TG_SCRAPE_SETTLE_MS"):
        values["settle_ms"] = _parse_non_negative_int(settle, DEFAULT_SETTLE_MS)
    if selector := os.getenv("TG_SCRAPE_CONTAINER_SELECTOR"):
        values["container_selector"] = selector
    if feed_url := os.getenv("TG_SCRAPE_FEED_URL"):
        values["feed_url"] = feed_url
    if export_dir := os.getenv("TG_SCRAPE_EXPORT_DIR"):
        values["export_dir"] = Path(export_dir).expanduser()
    if cdp_port := os.getenv("TG_SCRAPE_CDP_PORT"):
        values["cdp_port"] = _parse_non_negative_int(cdp_port, DEFAULT_CDP_PORT)
    if headless := os.getenv("TG_SCRAPE_HEADLESS"):
        values["headless"] = _env_bool(headless)

    values.update(overrides)
    return ScrapeConfig(**values)
