import json
import logging
import os
import time

from linkqr.models import RecentUrlEntry


logger = logging.getLogger(__name__)

HISTORY_KEY = "qr-recent-urls"
MAX_RECENT_URLS = 5


class MemoryStorage:
    """Key-value storage kept in a dict."""

    def __init__(self, initial=None):
        self._items = dict(initial or {})

    def get_item(self, key):
        return self._items.get(key)

    def set_item(self, key, value):
        self._items[key] = str(value)

    def remove_item(self, key):
        self._items.pop(key, None)


class JsonFileStorage:
    """Key-value storage persisted as one JSON object on disk.

    Values are strings, the same as browser local storage.
    """

    def __init__(self, path):
        self.path = path

    def _read(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as file_obj:
                data = json.load(file_obj)
        except (OSError, ValueError) as exc:
            logger.error("Could not read storage file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, items):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as file_obj:
            json.dump(items, file_obj, indent=2)

    def get_item(self, key):
        value = self._read().get(key)
        return None if value is None else str(value)

    def set_item(self, key, value):
        items = self._read()
        items[key] = str(value)
        self._write(items)

    def remove_item(self, key):
        items = self._read()
        if key in items:
            del items[key]
            self._write(items)


def now_ms():
    return int(time.time() * 1000)


class HistoryStore:
    """The five most recently generated URLs, newest first."""

    def __init__(self, storage, clock=None, key=HISTORY_KEY):
        self.storage = storage
        self.clock = clock or now_ms
        self.key = key
        self._entries = []

    @property
    def entries(self):
        return list(self._entries)

    def __len__(self):
        return len(self._entries)

    def load(self):
        self._entries = []
        saved = self.storage.get_item(self.key)
        if not saved:
            return self.entries
        try:
            raw = json.loads(saved)
        except ValueError as exc:
            logger.error("Failed to parse recent URLs: %s", exc)
            return self.entries
        if not isinstance(raw, list):
            logger.error("Failed to parse recent URLs: expected a list, got %s", type(raw).__name__)
            return self.entries

        seen = set()
        for item in raw:
            try:
                entry = RecentUrlEntry.from_dict(item)
            except ValueError as exc:
                logger.warning("Skipping malformed history entry %r: %s", item, exc)
                continue
            if entry.url in seen:
                continue
            seen.add(entry.url)
            self._entries.append(entry)
            if len(self._entries) >= MAX_RECENT_URLS:
                break
        return self.entries

    def add(self, url):
        entry = RecentUrlEntry(url=url, timestamp=int(self.clock()))
        updated = [entry] + [item for item in self._entries if item.url != url]
        self._entries = updated[:MAX_RECENT_URLS]
        self._persist()
        return entry

    def clear(self):
        self._entries = []
        self.storage.remove_item(self.key)

    def _persist(self):
        payload = json.dumps([entry.to_dict() for entry in self._entries])
        self.storage.set_item(self.key, payload)
