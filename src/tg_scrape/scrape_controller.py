"""Start/stop-able scrape loop: advance the feed, extract, decide.

One loop runs at a time on the asyncio event loop it was started from. The
loop, ``start()`` and ``stop()`` all run on that same loop, so the running
flag and the session's records are never touched concurrently and need no
lock. ``stop()`` takes effect at the next iteration boundary: a cycle in
flight finishes, but no new advance begins.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol

from rich.markup import escape

from tg_scrape.extract.advance_feed import advance_feed
from tg_scrape.extract.dedup_ledger import DedupLedger
from tg_scrape.extract.extract_records import extract_records
from tg_scrape.feed.base import FeedContainer
from tg_scrape.types.errors import PRECONDITION_MESSAGE
from tg_scrape.types.record import Record
from tg_scrape.types.scrape_config import ScrapeConfig, parse_delay_ms
from tg_scrape.utils.logger import logger

ContainerResolver = Callable[[], Awaitable[Optional[FeedContainer]]]


class ScrapeState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class StopReason(Enum):
    FINISHED = "finished"
    STOPPED = "stopped"
    ERROR = "error"


class ScrapeObserver(Protocol):
    def progress_update(self, count: int) -> None: ...

    def terminal_summary(self, count: int) -> None: ...

    def error_notice(self, message: str) -> None: ...


class NullObserver:
    """Observer used when no presentation is attached; only logs."""

    def progress_update(self, count: int) -> None:
        logger.debug(f"Scraped {count} messages")

    def terminal_summary(self, count: int) -> None:
        logger.success(f"Finished. Collected {count} messages")

    def error_notice(self, message: str) -> None:
        logger.error(escape(message))


@dataclass
class ScrapeSession:
    delay_ms: int
    records: list[Record] = field(default_factory=list)
    ledger: DedupLedger = field(default_factory=DedupLedger)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    stop_reason: Optional[StopReason] = None
    # Set by stop() to cut short a pending inter-iteration wait
    wake: asyncio.Event = field(default_factory=asyncio.Event)

    def close(self, reason: StopReason) -> None:
        if self.stop_reason is None:
            self.stop_reason = reason
            self.finished_at = datetime.now(timezone.utc)
        self.wake.set()


class ScrapeController:
    def __init__(
        self,
        resolve_container: ContainerResolver,
        observer: Optional[ScrapeObserver] = None,
        config: Optional[ScrapeConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._resolve_container = resolve_container
        self._observer = observer or NullObserver()
        self._config = config or ScrapeConfig()
        self._sleep = sleep
        self._delay_ms = self._config.delay_ms
        self._state = ScrapeState.IDLE
        self._session: Optional[ScrapeSession] = None
        self._task: Optional[asyncio.Task] = None
        self._starting = False

    @property
    def state(self) -> ScrapeState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ScrapeState.RUNNING

    @property
    def session(self) -> Optional[ScrapeSession]:
        """The current or most recent session. Kept after stop for exporting."""
        return self._session

    @property
    def records(self) -> list[Record]:
        return list(self._session.records) if self._session else []

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    def set_delay(self, value) -> int:
        """Set the wait between iterations; unparseable input restores the default."""
        self._delay_ms = parse_delay_ms(value)
        if self._session and self.is_running:
            self._session.delay_ms = self._delay_ms
        return self._delay_ms

    async def start(self) -> bool:
        """Begin a fresh session if a feed container can be resolved.

        Returns:
            True if a new loop was started. False when one is already running
            or no chat is open (the observer gets a guidance message).
        """
        if self.is_running or self._starting:
            logger.debug("Scrape already running, ignoring start request")
            return False

        self._starting = True
        try:
            container = await self._resolve_container()
        except Exception as e:
            logger.exception("Error resolving feed container", e)
            container = None
        finally:
            self._starting = False

        if container is None:
            logger.warning(PRECONDITION_MESSAGE)
            self._observer.error_notice(PRECONDITION_MESSAGE)
            return False

        session = ScrapeSession(delay_ms=self._delay_ms)
        self._session = session
        self._state = ScrapeState.RUNNING
        logger.info(f"Scraping started (delay {session.delay_ms}ms)")
        self._task = asyncio.create_task(self._run_loop(session, container))
        return True

    def stop(self) -> None:
        if not self.is_running:
            return
        self._state = ScrapeState.IDLE
        if self._session:
            self._session.close(StopReason.STOPPED)
            logger.info(f"Scraping stopped with {len(self._session.records)} messages")

    async def wait(self) -> None:
        """Wait for the current loop to exit."""
        if self._task:
            await asyncio.shield(self._task)

    async def run(self) -> list[Record]:
        """Scrape until the feed is exhausted or stop() is called."""
        if await self.start():
            await self.wait()
        return self.records

    def _is_current(self, session: ScrapeSession) -> bool:
        return self.is_running and session is self._session

    def _report_error(self, session: ScrapeSession, error: Exception) -> None:
        if session is self._session:
            self._observer.error_notice(str(error))

    async def _run_loop(self, session: ScrapeSession, container: FeedContainer) -> None:
        def report(error: Exception) -> None:
            self._report_error(session, error)

        try:
            while self._is_current(session):
                loaded_more = await advance_feed(
                    container, self._config.settle_ms, on_error=report, sleep=self._sleep
                )

                # Extract even when nothing loaded, to drain the last rendered batch
                try:
                    await extract_records(
                        container, session.ledger, session.records, self._config, on_error=report
                    )
                except Exception as e:
                    logger.exception("Extraction pass failed", e)
                    report(e)

                if session is not self._session:
                    return
                count = len(session.records)
                self._observer.progress_update(count)

                if not loaded_more:
                    self._finish(session)
                    return

                await self._wait_delay(session)
        except Exception as e:
            logger.exception("Scrape loop crashed", e)
            if session is self._session:
                self._state = ScrapeState.IDLE
                session.close(StopReason.ERROR)
                self._observer.error_notice(str(e))

    def _finish(self, session: ScrapeSession) -> None:
        # A stopped session already reported its end through stop()
        if not self._is_current(session):
            return
        count = len(session.records)
        self._state = ScrapeState.IDLE
        session.close(StopReason.FINISHED)
        logger.success(f"Finished. Collected {count} messages")
        self._observer.terminal_summary(count)

    async def _wait_delay(self, session: ScrapeSession) -> None:
        """Sleep the session delay, returning early if the session is stopped."""
        if session.wake.is_set():
            return
        sleeper = asyncio.ensure_future(self._sleep(session.delay_ms / 1000))
        waker = asyncio.ensure_future(session.wake.wait())
        try:
            await asyncio.wait({sleeper, waker}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (sleeper, waker):
                if not pending.done():
                    pending.cancel()
