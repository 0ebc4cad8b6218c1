from tg_scrape.cli.app import ScraperApp
from tg_scrape.utils.logger import logger


def start():
    # Keep startup logging out of the terminal until the Textual UI owns it;
    # the Logs tab re-enables the logger once mounted
    with logger.suppress():
        app = ScraperApp()
        app.run()
