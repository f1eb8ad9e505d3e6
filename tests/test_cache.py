import json
import os
import tempfile
import unittest

from ytchill.cache import DEFAULT_TTL_SECONDS, SearchCache


class FakeClock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now


class SearchCacheTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.cache_dir = os.path.join(self.tmpdir.name, "search")
        self.clock = FakeClock()
        self.cache = SearchCache(self.cache_dir, clock=self.clock)

    def tearDown(self):
        self.tmpdir.cleanup()

    def _unit_path(self, logical_key):
        return os.path.join(self.cache_dir, f"{SearchCache.key(logical_key)}.json")

    def test_key_is_deterministic_hex_digest(self):
        key = SearchCache.key("video:lofi:15")
        self.assertEqual(key, SearchCache.key("video:lofi:15"))
        self.assertEqual(len(key), 64)
        int(key, 16)
        self.assertNotEqual(key, SearchCache.key("video:lofi:16"))
        self.assertNotEqual(key, SearchCache.key("channel:lofi:15"))

    def test_round_trip(self):
        value = [{"id": "abc", "title": "Song"}, {"id": "def", "title": "Other"}]
        self.cache.set("video:lofi:15", value, ttl=60)
        self.assertEqual(self.cache.get("video:lofi:15"), value)

    def test_unit_layout(self):
        self.cache.set("video:lofi:15", ["x"])
        with open(self._unit_path("video:lofi:15"), "r", encoding="utf-8") as f:
            entry = json.load(f)
        self.assertEqual(entry, {"data": ["x"], "timestamp": self.clock.now, "ttl": DEFAULT_TTL_SECONDS})
        self.assertEqual(os.listdir(self.cache_dir), [f"{SearchCache.key('video:lofi:15')}.json"])

    def test_missing_key(self):
        self.assertIsNone(self.cache.get("video:nothing:15"))

    def test_valid_until_ttl_boundary(self):
        self.cache.set("k", {"a": 1}, ttl=100)
        self.clock.now += 100
        self.assertEqual(self.cache.get("k"), {"a": 1})

    def test_expired_entry_is_removed(self):
        self.cache.set("k", {"a": 1}, ttl=100)
        self.clock.now += 101
        self.assertIsNone(self.cache.get("k"))
        self.assertFalse(os.path.exists(self._unit_path("k")))

    def test_corrupt_entry_is_a_miss(self):
        os.makedirs(self.cache_dir)
        with open(self._unit_path("k"), "w", encoding="utf-8") as f:
            f.write("{truncated")
        self.assertIsNone(self.cache.get("k"))

    def test_malformed_entry_is_a_miss(self):
        os.makedirs(self.cache_dir)
        with open(self._unit_path("k"), "w", encoding="utf-8") as f:
            json.dump({"data": [1], "timestamp": "soon"}, f)
        self.assertIsNone(self.cache.get("k"))

    def test_overwrite(self):
        self.cache.set("k", [1])
        self.cache.set("k", [2])
        self.assertEqual(self.cache.get("k"), [2])

    def test_no_temp_files_left_behind(self):
        self.cache.set("a", [1])
        self.cache.set("b", [2])
        leftovers = [name for name in os.listdir(self.cache_dir) if name.endswith(".tmp")]
        self.assertEqual(leftovers, [])

    def test_clear_all(self):
        self.cache.set("a", [1])
        self.cache.clear_all()
        self.assertFalse(os.path.exists(self.cache_dir))
        self.assertIsNone(self.cache.get("a"))
        # Clearing an absent cache is fine.
        self.cache.clear_all()
