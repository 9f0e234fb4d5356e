import json
import os
import threading
from typing import Any, Optional

from . import config
from .logging_config import get_logger

log = get_logger("preferences")

DEFAULT_SETTINGS = {
    "active_profile_uuid": "",
    "language": "en",
    "hide_sensitive": True,
    "last_seen_format": "",
    "appearance": "dark",
}


def load_json(path: str, default: dict[str, Any]) -> dict[str, Any]:
    """Load JSON dictionary and merge with defaults."""
    try:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
                if isinstance(data, dict):
                    merged = default.copy()
                    merged.update(data)
                    return merged
    except (OSError, ValueError) as e:
        log.warning("Failed to read %s: %s", path, e)
    return default.copy()


def save_json(path: str, data: dict[str, Any]) -> None:
    """Persist dictionary to JSON file."""
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
    except OSError as e:
        log.error("Failed to write %s: %s", path, e)


class Preferences:
    """Launcher preferences stored as JSON next to the profile database."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or config.SETTINGS_FILE
        self._lock = threading.Lock()
        self._data = load_json(self.path, DEFAULT_SETTINGS)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, DEFAULT_SETTINGS.get(key, default))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            snapshot = dict(self._data)
        save_json(self.path, snapshot)

    def as_dict(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._data)
