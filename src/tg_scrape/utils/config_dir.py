from pathlib import Path

from platformdirs import user_config_dir, user_downloads_dir

CONFIG_DIR_NAME = "tg_scrape"


def get_config_dir() -> Path:
    """Get the application's configuration directory path."""
    config_dir = Path(user_config_dir(CONFIG_DIR_NAME))
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_browser_profile_dir() -> Path:
    """Persistent Chromium profile, keeps the Telegram login between runs."""
    profile_dir = get_config_dir() / "browser-profile"
    profile_dir.mkdir(parents=True, exist_ok=True)
    return profile_dir


def get_default_export_dir() -> Path:
    return Path(user_downloads_dir())
