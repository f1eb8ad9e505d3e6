import json
import logging
import time

from ytchill.errors import StorageError
from ytchill.fileio import atomic_write_json, remove_file
from ytchill.models import HistoryEntry

DEFAULT_MAX_ENTRIES = 100


class History:
    """Watch history: unique by video id, newest first, bounded.

    Every mutation rewrites the whole file before returning.
    """

    def __init__(self, path, max_entries=DEFAULT_MAX_ENTRIES, clock=time.time):
        self.path = path
        self.max_entries = max(0, int(max_entries))
        self._clock = clock
        self._entries = []

    def load(self):
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            self._entries = []
            return
        except OSError as exc:
            raise StorageError(f"Cannot read history {self.path}: {exc}", path=self.path) from exc

        try:
            items = json.loads(raw)
        except ValueError:
            logging.warning("History file is corrupt; starting with empty history: %s", self.path)
            self._entries = []
            return
        if not isinstance(items, list):
            logging.warning("History file has unexpected shape; starting with empty history: %s", self.path)
            self._entries = []
            return

        entries = []
        seen = set()
        for item in items:
            try:
                entry = HistoryEntry.from_dict(item)
            except (KeyError, TypeError, ValueError, AttributeError):
                continue
            if entry.video.id in seen:
                continue
            seen.add(entry.video.id)
            entries.append(entry)
        self._entries = entries[: self.max_entries]

    def save(self):
        self._write(self._entries)

    def _write(self, entries):
        atomic_write_json(self.path, [entry.to_dict() for entry in entries], indent=2)

    def add(self, video):
        entry = HistoryEntry(video=video, timestamp=int(self._clock()))
        entries = [e for e in self._entries if e.video.id != video.id]
        entries.insert(0, entry)
        entries = entries[: self.max_entries]
        # Memory only changes once the file is written.
        self._write(entries)
        self._entries = entries

    def remove(self, video_id):
        remaining = [e for e in self._entries if e.video.id != video_id]
        if len(remaining) == len(self._entries):
            return False
        self._write(remaining)
        self._entries = remaining
        return True

    def get_all(self):
        return list(self._entries)

    def clear(self):
        self._entries = []
        remove_file(self.path)
