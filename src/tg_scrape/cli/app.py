from typing import Optional

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widgets import Button, Footer, Header, Input, Label, Static, TabbedContent

from tg_scrape.browser import FeedBrowser
from tg_scrape.cli.logs_panel import LogsPanel
from tg_scrape.export import CSV_FILENAME, JSON_FILENAME, export_csv, export_json, save_export
from tg_scrape.scrape_controller import ContainerResolver, ScrapeController
from tg_scrape.types.scrape_config import ScrapeConfig, load_scrape_config
from tg_scrape.utils.logger import logger

PROGRESS_TEXT = {
    "READY": "Ready",
    "SCRAPING": "Scraping...",
    "OPENING": "Opening browser...",
    "BROWSER_READY": "Open a chat or channel, then press Start",
}


class ScrapePanel(Static):
    def __init__(self, delay_ms: int, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._delay_ms = delay_ms

    def compose(self) -> ComposeResult:
        yield Container(
            Horizontal(
                Button("Start Scrape", id="start-btn", variant="primary", name="start"),
                Button("Stop Scrape", id="stop-btn", disabled=True, name="stop"),
                Button("Export JSON", id="json-btn", disabled=True, name="export_json"),
                Button("Export CSV", id="csv-btn", disabled=True, name="export_csv"),
                id="scrape-buttons",
            ),
            Horizontal(
                Label("Delay (ms):"),
                Input(value=str(self._delay_ms), id="delay-input", type="integer"),
                id="delay-row",
            ),
            Label(PROGRESS_TEXT["READY"], id="progress"),
            id="scrape-container",
        )


class ScraperApp(App):
    TITLE = "Telegram scraper"
    BINDINGS = [
        ("ctrl+c", "request_quit", "Quit"),
    ]
    CSS = """
    #scrape-buttons Button { margin-right: 1; }
    #delay-row { height: auto; margin-top: 1; }
    #delay-row Label { padding: 1 1 0 0; }
    #delay-input { width: 16; }
    #progress { margin-top: 1; }
    """

    def __init__(
        self,
        config: Optional[ScrapeConfig] = None,
        resolve_container: Optional[ContainerResolver] = None,
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.scrape_config = config or load_scrape_config()
        # Without an injected resolver the app drives its own browser
        self.browser: Optional[FeedBrowser] = None
        if resolve_container is None:
            self.browser = FeedBrowser(self.scrape_config)
            resolve_container = self.browser.resolve_container
        self.controller = ScrapeController(
            resolve_container, observer=self, config=self.scrape_config
        )
        self.progress_text = PROGRESS_TEXT["READY"]
        self.last_export_path = None

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent("★ Scrape", "✧ Logs", id="main-content"):
            yield ScrapePanel(self.scrape_config.delay_ms, id="scrape-tab")
            yield LogsPanel(id="logs-tab")
        yield Footer()

    def on_mount(self) -> None:
        if self.browser is not None:
            self.set_progress(PROGRESS_TEXT["OPENING"])
            self.run_worker(self._open_browser(), exclusive=True)

    async def _open_browser(self) -> None:
        try:
            await self.browser.open()
            self.set_progress(PROGRESS_TEXT["BROWSER_READY"])
        except Exception as e:
            logger.exception("Failed to open browser", e)
            self.error_notice(f"Could not open the browser: {e}")

    # ScrapeObserver

    def progress_update(self, count: int) -> None:
        self.set_progress(f"Scraped {count} messages")

    def terminal_summary(self, count: int) -> None:
        self.set_progress(f"Finished. Collected {count} messages")
        self._sync_buttons()

    def error_notice(self, message: str) -> None:
        self.set_progress(f"Error: {message}")
        self.notify(escape(message), severity="error")
        self._sync_buttons()

    # UI helpers

    def set_progress(self, text: str) -> None:
        self.progress_text = text
        try:
            self.query_one("#progress", Label).update(escape(text))
        except NoMatches:
            logger.debug(f"Progress label not mounted: {escape(text)}")

    def _sync_buttons(self) -> None:
        """Start/stop follow the loop state; exports need an idle session with records."""
        running = self.controller.is_running
        has_records = bool(self.controller.records)
        try:
            self.query_one("#start-btn", Button).disabled = running
            self.query_one("#stop-btn", Button).disabled = not running
            self.query_one("#json-btn", Button).disabled = running or not has_records
            self.query_one("#csv-btn", Button).disabled = running or not has_records
        except NoMatches:
            logger.debug("Scrape buttons not mounted")

    # Commands

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        try:
            if event.button.name == "start":
                await self.action_start_scrape()
            elif event.button.name == "stop":
                self.action_stop_scrape()
            elif event.button.name == "export_json":
                self.action_export("json")
            elif event.button.name == "export_csv":
                self.action_export("csv")
        except Exception as e:
            logger.exception("Unhandled error", e)
            self.error_notice(str(e))

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "delay-input":
            self.controller.set_delay(event.value)

    async def action_start_scrape(self) -> None:
        self.query_one("#start-btn", Button).disabled = True
        started = await self.controller.start()
        if started:
            self.set_progress(PROGRESS_TEXT["SCRAPING"])
        self._sync_buttons()

    def action_stop_scrape(self) -> None:
        self.controller.stop()
        self._sync_buttons()

    def action_export(self, fmt: str) -> None:
        records = self.controller.records
        if fmt == "json":
            data, filename = export_json(records), JSON_FILENAME
        else:
            data, filename = export_csv(records), CSV_FILENAME
        try:
            self.last_export_path = save_export(data, filename, self.scrape_config.export_dir)
        except OSError as e:
            logger.exception("Export failed", e)
            self.error_notice(f"Export failed: {e}")
            return
        self.notify(escape(f"Saved {self.last_export_path}"))

    async def action_request_quit(self) -> None:
        """Stop scraping, release the browser and exit."""
        self.controller.stop()
        logger.mark_shutting_down()
        if self.browser is not None:
            await self.browser.close()
        self.exit()
