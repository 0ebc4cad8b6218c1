import platform
import subprocess
from pathlib import Path

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Button, Log, Static

from tg_scrape.utils.logger import logger


class LogsPanel(Static):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._log_file_path: Path | None = logger.get_log_file_path()
        self._last_log_position: int = 0

    def compose(self) -> ComposeResult:
        with Vertical(id="logs-container"):
            yield Log(highlight=True, auto_scroll=True, id="app-logs")
            yield Button("Open logs file", id="open-log-file-btn", name="open_log_file")

    def on_mount(self) -> None:
        self._read_new_lines()
        self.set_interval(0.5, self._read_new_lines)

        # Re-enable logging now that we have a UI to show logs
        logger.enabled = True
        logger.debug("Logs panel initialized")

    def _read_new_lines(self) -> None:
        """Append whatever was written to the log file since the last read."""
        log_widget = self.query_one("#app-logs", Log)
        if not self._log_file_path or not self._log_file_path.exists():
            return
        try:
            with open(self._log_file_path, "r", encoding="utf-8") as f:
                f.seek(self._last_log_position)
                new_content = f.read()
                if new_content:
                    log_widget.write(new_content)
                    self._last_log_position = f.tell()
        except OSError as e:
            # Log the error internally, but don't spam the UI widget
            logger.exception(f"Error reading log file {self._log_file_path}", e)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.name == "open_log_file":
            event.stop()
            self.action_open_log_file()

    def action_open_log_file(self) -> None:
        """Opens the log file using the default system application."""
        log_file_path = logger.get_log_file_path()
        if not log_file_path or not log_file_path.exists():
            logger.warning("Log file is not available.")
            return
        try:
            if platform.system() == "Windows":
                subprocess.Popen(["start", str(log_file_path)], shell=True)
            elif platform.system() == "Darwin":  # macOS
                subprocess.Popen(["open", str(log_file_path)])
            else:  # Linux and other Unix-like systems
                subprocess.Popen(["xdg-open", str(log_file_path)])
        except OSError as e:
            logger.exception(f"Failed to open log file {log_file_path}", e)
