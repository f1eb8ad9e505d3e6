import logging
import re
import urllib.parse
from concurrent.futures import ThreadPoolExecutor

from ytchill.cache import DEFAULT_TTL_SECONDS
from ytchill.errors import NoResults, StorageError, YtChillError
from ytchill.initial_data import extract_initial_data
from ytchill.models import ChannelInfo, Video
from ytchill.parser import parse_channels, parse_videos

SEARCH_URL = "https://www.youtube.com/results"
# Opaque "sp" tokens: Type = Video / Type = Channel.
_FILTER_TOKENS = {
    "video": "EgIQAQ%3D%3D",
    "channel": "EgIQAg%3D%3D",
}
DEFAULT_FEED_WORKERS = 4

_WHITESPACE_RE = re.compile(r"\s+")


def build_search_url(query, kind):
    token = _FILTER_TOKENS.get(kind, "")
    return f"{SEARCH_URL}?search_query={urllib.parse.quote(query)}&sp={token}"


def normalize_query(value):
    return _WHITESPACE_RE.sub(" ", value or "").strip().lower()


def logical_cache_key(namespace, argument, limit):
    return f"{namespace}:{normalize_query(argument)}:{int(limit)}"


def _encode_records(records):
    return [record.to_dict() for record in records]


class CachedCall:
    """Check-then-populate wrapper around one kind of search.

    Owns the key namespace, the TTL and payload decoding. Writes are best
    effort: a failing write is logged and the fresh result is still returned.
    Empty results are never stored.
    """

    def __init__(self, cache, namespace, decode, ttl=DEFAULT_TTL_SECONDS):
        self.cache = cache
        self.namespace = namespace
        self.decode = decode
        self.ttl = ttl

    def _load(self, logical_key):
        if self.cache is None:
            return None
        cached = self.cache.get(logical_key)
        if cached is None:
            return None
        try:
            return [self.decode(item) for item in cached]
        except (KeyError, TypeError, ValueError, AttributeError):
            logging.debug("Ignoring undecodable cache payload for %r", logical_key)
            return None

    def _store(self, logical_key, records):
        if self.cache is None or not records:
            return
        try:
            self.cache.set(logical_key, _encode_records(records), ttl=self.ttl)
        except StorageError as exc:
            logging.warning("Search cache write failed for %r: %s", logical_key, exc)

    def __call__(self, argument, limit, compute):
        logical_key = logical_cache_key(self.namespace, argument, limit)
        cached = self._load(logical_key)
        if cached is not None:
            logging.debug("Cache hit for %r", logical_key)
            return cached
        records = compute()
        self._store(logical_key, records)
        return records


class SearchService:
    def __init__(self, fetcher, cache=None, ttl=DEFAULT_TTL_SECONDS):
        self.fetcher = fetcher
        self.cache = cache
        self._videos = CachedCall(cache, "video", Video.from_dict, ttl)
        self._channels = CachedCall(cache, "channels", ChannelInfo.from_dict, ttl)
        self._channel_videos = CachedCall(cache, "channel", Video.from_dict, ttl)

    def _scrape(self, url, parse, limit):
        page = self.fetcher.fetch(url)
        data = extract_initial_data(page)
        return parse(data, limit)

    def search_videos(self, query, limit):
        url = build_search_url(query, "video")
        videos = self._videos(query, limit, lambda: self._scrape(url, parse_videos, limit))
        if not videos:
            raise NoResults(f"No videos found for {query!r}")
        return videos

    def search_channels(self, query, limit):
        url = build_search_url(query, "channel")
        channels = self._channels(query, limit, lambda: self._scrape(url, parse_channels, limit))
        if not channels:
            raise NoResults(f"No channels found for {query!r}")
        return channels

    def fetch_channel_videos(self, handle, limit):
        # Channels can legitimately come back empty; the feed expects that.
        url = build_search_url(handle, "video")
        return self._channel_videos(handle, limit, lambda: self._scrape(url, parse_videos, limit))

    def fetch_feed(self, subscriptions, limit_per_channel, max_workers=DEFAULT_FEED_WORKERS):
        """Videos from every subscription, grouped in subscription order.

        Each channel is fetched independently; a failing channel is logged and
        contributes nothing. Duplicate video ids keep their first position.
        """
        subscriptions = list(subscriptions)
        if not subscriptions:
            return []

        def _fetch(subscription):
            try:
                return self.fetch_channel_videos(subscription.handle, limit_per_channel)
            except YtChillError as exc:
                logging.warning("Feed fetch failed for %s (%s): %s", subscription.name, subscription.handle, exc)
                return []

        workers = max(1, min(int(max_workers), len(subscriptions)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            per_channel = list(pool.map(_fetch, subscriptions))

        feed = []
        seen = set()
        for videos in per_channel:
            for video in videos:
                if video.id in seen:
                    continue
                seen.add(video.id)
                feed.append(video)
        logging.info("Feed built: %d videos from %d channels", len(feed), len(subscriptions))
        return feed
