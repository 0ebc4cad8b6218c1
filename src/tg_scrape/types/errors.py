# Shown to the user when start is requested with no chat open
PRECONDITION_MESSAGE = "Please open a Telegram channel, community or group before scraping."


class ScrapeError(Exception):
    """Base class for failures raised inside the scrape loop."""


class PreconditionError(ScrapeError):
    """No feed container could be resolved when a scrape was requested."""

    def __init__(self, message: str = PRECONDITION_MESSAGE):
        super().__init__(message)


class FeedUnavailableError(ScrapeError):
    """The feed container element is no longer in the page."""


class AdvanceError(ScrapeError):
    """Requesting or measuring older content failed."""


class RecordExtractionError(ScrapeError):
    """Building a single record failed. Only that entry is dropped."""

    def __init__(self, entry_id: str, cause: BaseException):
        super().__init__(f"Failed to extract message {entry_id or '<unknown>'}: {cause}")
        self.entry_id = entry_id
        self.cause = cause
