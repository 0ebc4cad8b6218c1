from collections.abc import Callable
from typing import Optional

from rich.markup import escape

from tg_scrape.extract.dedup_ledger import DedupLedger
from tg_scrape.extract.extract_field import entry_id, resolve_media, resolve_text
from tg_scrape.feed.base import FeedContainer, FeedElement
from tg_scrape.types.errors import RecordExtractionError
from tg_scrape.types.record import Record
from tg_scrape.types.scrape_config import ScrapeConfig
from tg_scrape.utils.logger import logger

ErrorCallback = Callable[[Exception], None]


async def find_entries(container: FeedContainer, config: ScrapeConfig) -> list[FeedElement]:
    """Locate entries with the first strategy that yields any.

    The host markup is not ours and drifts between releases, so looser
    strategies back up the primary selector.
    """
    for strategy in config.entry_strategies:
        entries = await container.select_all(strategy.selector)
        if entries:
            logger.debug(f"Found {len(entries)} entries with '{escape(strategy.name)}' strategy")
            return entries
    return []


async def build_record(element: FeedElement, record_id: str, config: ScrapeConfig) -> Record:
    """Build a record, each field resolved on its own and defaulted when absent."""
    rules = config.field_rules
    return Record(
        id=record_id,
        sender=await resolve_text(element, rules.sender),
        timestamp=await resolve_text(element, rules.timestamp),
        text=await resolve_text(element, rules.text),
        media=await resolve_media(element, config.media_selector),
        forwarded_from=await resolve_text(element, rules.forwarded_from),
        reply_to=await resolve_text(element, rules.reply_to),
    )


async def extract_records(
    container: FeedContainer,
    ledger: DedupLedger,
    records: list[Record],
    config: ScrapeConfig,
    on_error: Optional[ErrorCallback] = None,
) -> list[Record]:
    """Capture entries not yet in ``ledger``, appending them to ``records``.

    Entries are walked bottom to top so each pass appends newest to oldest,
    matching the overall order of a feed walked back in time. Re-running on
    an unchanged container captures nothing.

    Returns:
        The records appended by this pass, in append order.
    """
    if not await container.is_present():
        logger.warning("Feed container not present, nothing to extract")
        return []

    entries = await find_entries(container, config)
    if not entries:
        logger.debug("No entries found with any strategy")
        return []

    batch: list[Record] = []
    for element in reversed(entries):
        record_id = ""
        try:
            record_id = await entry_id(element, config.id_attributes)
            if not record_id or record_id in ledger:
                continue

            record = await build_record(element, record_id, config)

            ledger.add(record_id)
            records.append(record)
            batch.append(record)
        except Exception as e:
            error = RecordExtractionError(record_id, e)
            logger.exception("Skipping message", error)
            if on_error:
                on_error(error)

    if batch:
        logger.debug(f"Captured {len(batch)} new messages ({len(records)} total)")
    return batch
