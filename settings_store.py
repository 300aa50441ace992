import json
import logging
import os


logger = logging.getLogger(__name__)

SETTINGS_FILE = "app_settings.json"


DEFAULT_SETTINGS = {
    "default_size": 256,
    "logo_enabled": False,
    "auto_detect_logo": True,
    "favicon_timeout": 3.0,
    "logo_timeout": 8.0,
    "qr_timeout": 10.0,
    "history_file": "qr_history.json",
    "log_dir": "logs",
    "log_level": "INFO",
}


def load_settings(path=SETTINGS_FILE):
    settings = DEFAULT_SETTINGS.copy()
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as file_obj:
                data = json.load(file_obj)
                if isinstance(data, dict):
                    settings.update(data)
        except (OSError, ValueError) as exc:
            # Fall back to defaults if settings file is invalid.
            logger.warning("Ignoring invalid settings file %s: %s", path, exc)
    return settings


def save_settings(settings, path=SETTINGS_FILE):
    merged = DEFAULT_SETTINGS.copy()
    merged.update(settings or {})
    with open(path, "w", encoding="utf-8") as file_obj:
        json.dump(merged, file_obj, indent=2)
    return merged
