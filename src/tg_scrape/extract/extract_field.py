from tg_scrape.feed.base import FeedElement
from tg_scrape.types.record import BLOB_URL_PREFIX
from tg_scrape.types.scrape_config import FieldRule


async def entry_id(element: FeedElement, id_attributes: list[str]) -> str:
    """Return the first non-empty id attribute of an entry, or ""."""
    for name in id_attributes:
        value = await element.attribute(name)
        if value and value.strip():
            return value.strip()
    return ""


async def resolve_rule(element: FeedElement, rule: FieldRule) -> str:
    match = await element.select_one(rule.selector)
    if match is None:
        return ""
    value = await match.attribute(rule.attribute) if rule.attribute else await match.text()
    return (value or "").strip()


async def resolve_text(element: FeedElement, rules: list[FieldRule]) -> str:
    """Resolve a scalar field from ordered rules. A missing element yields ""."""
    for rule in rules:
        value = await resolve_rule(element, rule)
        if value:
            return value
    return ""


async def resolve_media(element: FeedElement, selector: str) -> list[str]:
    """Collect resource URLs of images, videos and links, skipping blob: URLs."""
    urls: list[str] = []
    for match in await element.select_all(selector):
        url = await match.resource_url()
        if url and not url.startswith(BLOB_URL_PREFIX):
            urls.append(url)
    return urls
