"""JSON-based settings for the crossover calendar."""

import json
import logging
import os

from crossover import MAX_CHECK_INTERVAL

logger = logging.getLogger(__name__)

_DEFAULT_PATH = os.path.join(os.path.expanduser("~"), ".crossover-calendar.json")

_DEFAULTS = {
    "holiday_file": "holidays.conf",
    "verbose": "v",
    "log_file": None,
    "max_check_interval": MAX_CHECK_INTERVAL,
    "wake_poll_interval": 60,
}


def settings_path() -> str:
    return os.environ.get("CROSSOVER_CALENDAR_SETTINGS", _DEFAULT_PATH)


def load_settings(path: str | None = None) -> dict:
    """Load settings from disk, returning defaults for missing or invalid keys."""
    settings = dict(_DEFAULTS)
    path = path or settings_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except FileNotFoundError:
        return settings
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Ignoring settings file %s: %s", path, exc)
        return settings
    if not isinstance(stored, dict):
        logger.warning("Ignoring settings file %s: not a JSON object", path)
        return settings

    for key in ("holiday_file", "verbose"):
        if isinstance(stored.get(key), str):
            settings[key] = stored[key]
    if isinstance(stored.get("log_file"), str) and stored["log_file"]:
        settings["log_file"] = stored["log_file"]
    for key in ("max_check_interval", "wake_poll_interval"):
        value = stored.get(key)
        # bool is an int subclass
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            settings[key] = value
    return settings
