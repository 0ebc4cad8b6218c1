import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.markup import escape

from tg_scrape.utils.config_dir import get_config_dir

# One log file per scraper run, tailed by the Logs tab
CONFIG_DIR = get_config_dir()
LOG_FILE = CONFIG_DIR / "tg_scrape_session.log"

try:
    log_file_handle = open(LOG_FILE, "w", encoding="utf-8")
except OSError as e:
    print(f"Error opening log file {LOG_FILE}: {e}", file=sys.stderr)
    log_file_handle = None


class Logger:
    """Rich-markup logger for the scraper session.

    Messages are rich markup. Values that come from the page or from
    configuration (selectors, URLs, exception text) must go through
    ``escape`` first, or rich will read ``[attr="..."]`` as a tag.
    """

    def __init__(self, enabled: bool = True, file: TextIO | None = log_file_handle):
        self.enabled = enabled
        self._console = Console(file=file)
        self._shutting_down = False

    def mark_shutting_down(self):
        """Drop everything logged after the app starts tearing down."""
        self._shutting_down = True

    def _emit(self, message: Any, style: str | None = None, *args, **kwargs):
        if not self.enabled or self._shutting_down:
            return
        if style:
            message = f"[{style}]{message}[/{style}]"
        self._console.print(message, *args, **kwargs)

    def debug(self, message: Any, *args, **kwargs):
        self._emit(message, "dim", *args, **kwargs)

    def info(self, message: Any, *args, **kwargs):
        self._emit(message, None, *args, **kwargs)

    def warning(self, message: Any, *args, **kwargs):
        self._emit(message, "yellow", *args, **kwargs)

    def error(self, message: Any, *args, **kwargs):
        self._emit(message, "red", *args, **kwargs)

    def success(self, message: Any, *args, **kwargs):
        self._emit(message, "green", *args, **kwargs)

    def exception(self, message: Any, exc: BaseException):
        """Log an error followed by the exception text, escaped for rich markup."""
        self.error(f"{message}: {escape(str(exc))}")

    @contextmanager
    def suppress(self):
        """Temporarily suppress all output."""
        old_enabled = self.enabled
        self.enabled = False
        try:
            yield
        finally:
            self.enabled = old_enabled

    def get_log_file_path(self) -> Path | None:
        """Return the path to the log file, if configured."""
        if log_file_handle:
            return LOG_FILE
        return None


logger = Logger()

if log_file_handle:
    logger.debug(f"Logging to file: {escape(str(LOG_FILE))}")
else:
    logger.warning("Logging to file disabled due to error during file open.")
