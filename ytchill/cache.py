import hashlib
import json
import logging
import os
import shutil
import time

from ytchill.errors import StorageError
from ytchill.fileio import atomic_write_json, remove_file

DEFAULT_TTL_SECONDS = 3600


class SearchCache:
    """On-disk TTL cache, one JSON file per key, no shared index.

    Files are named by the SHA-256 of the logical key and hold
    ``{"data": ..., "timestamp": <unix s>, "ttl": <s>}``. Expired entries are
    deleted when read; there is no background sweep.
    """

    def __init__(self, cache_dir, clock=time.time):
        self.cache_dir = cache_dir
        self._clock = clock

    @staticmethod
    def key(logical_key):
        return hashlib.sha256(logical_key.encode("utf-8")).hexdigest()

    def _path(self, logical_key):
        return os.path.join(self.cache_dir, f"{self.key(logical_key)}.json")

    def _now(self):
        return int(self._clock())

    def get(self, logical_key):
        path = self._path(logical_key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                entry = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logging.debug("Cache entry unreadable for %r: %s", logical_key, exc)
            return None
        if not isinstance(entry, dict) or "data" not in entry:
            logging.debug("Cache entry malformed for %r", logical_key)
            return None
        try:
            timestamp = int(entry["timestamp"])
            ttl = int(entry["ttl"])
        except (KeyError, TypeError, ValueError):
            logging.debug("Cache entry malformed for %r", logical_key)
            return None
        if self._now() - timestamp > ttl:
            logging.debug("Cache entry expired for %r", logical_key)
            try:
                remove_file(path)
            except StorageError as exc:
                logging.debug("Expired cache entry not removed: %s", exc)
            return None
        return entry["data"]

    def set(self, logical_key, value, ttl=DEFAULT_TTL_SECONDS):
        entry = {
            "data": value,
            "timestamp": self._now(),
            "ttl": int(ttl),
        }
        atomic_write_json(self._path(logical_key), entry)

    def clear_all(self):
        if not os.path.exists(self.cache_dir):
            return
        try:
            shutil.rmtree(self.cache_dir)
        except OSError as exc:
            raise StorageError(f"Cannot clear cache {self.cache_dir}: {exc}", path=self.cache_dir) from exc
        logging.info("Search cache cleared: %s", self.cache_dir)
