"""
yt-chill: YouTube audio in your terminal.
- Scrapes YouTube search results (no API key) and caches them on disk.
- Streams with mpv (audio-only unless --video), downloads with yt-dlp.
- Keeps a bounded watch history and a flat list of channel subscriptions.
"""

import argparse
import json
import logging
import platform
import shutil
import subprocess
import sys
from importlib import metadata
from logging.handlers import RotatingFileHandler

from ytchill.cache import SearchCache
from ytchill.config import edit_config, load_config
from ytchill.downloader import download
from ytchill.errors import ConfigError, NoResults, YtChillError
from ytchill.fetcher import PageFetcher
from ytchill.history import History
from ytchill.models import MenuItem
from ytchill.paths import build_app_paths, ensure_app_dirs
from ytchill.player import build_video_url, create_player
from ytchill.search import SearchService
from ytchill.selector import detect_selector
from ytchill.subscriptions import SubscriptionStore

STATE_INIT = "init"
STATE_SEARCH = "search"
STATE_HISTORY = "history"
STATE_FEED = "feed"
STATE_SUBSCRIBE = "subscribe"
STATE_UNSUBSCRIBE = "unsubscribe"
STATE_PLAY = "play"
STATE_EXIT = "exit"

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def _setup_logging(log_path, verbose=False):
    root = logging.getLogger("")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(file_handler)
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    # Keep the terminal clean for the menus; details go to the log file.
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.addHandler(console)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_runtime_info():
    try:
        version = metadata.version("yt-chill")
    except metadata.PackageNotFoundError:
        version = "unknown"
    return {
        "version": version,
        "python": platform.python_version(),
        "platform": platform.platform(),
        "binaries": {name: shutil.which(name) for name in ("mpv", "syncplay", "fzf", "ffmpeg")},
    }


def format_video_label(video):
    label = f"{video.title} [{video.duration}] - {video.author}"
    details = " · ".join(part for part in (video.views, video.published) if part)
    if details:
        label = f"{label} ({details})"
    return label


def notify(message):
    if not shutil.which("notify-send"):
        return
    try:
        subprocess.run(["notify-send", "yt-chill", message], check=False)
    except OSError as exc:
        logging.debug("notify-send failed: %s", exc)


def _say(message):
    print(message, file=sys.stderr)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="yt-chill",
        description="YouTube audio in your terminal. Clean and distraction-free.",
    )
    parser.add_argument("query", nargs="*", help="Search query.")
    parser.add_argument("--video", action="store_true", help="Include video (audio-only by default).")
    parser.add_argument("-d", "--download", action="store_true", help="Download instead of streaming.")
    parser.add_argument("--history", action="store_true", help="Show and replay from viewing history.")
    parser.add_argument("-F", "--feed", action="store_true", help="View videos from your subscriptions.")
    parser.add_argument("-s", "--subscribe", action="store_true", help="Add a channel to subscriptions.")
    parser.add_argument("-u", "--unsubscribe", action="store_true", help="Remove a channel from subscriptions.")
    parser.add_argument("--syncplay", action="store_true", help="Watch with friends via syncplay.")
    parser.add_argument("-l", "--limit", type=int, default=None, help="Limit search results.")
    parser.add_argument("--copy-url", action="store_true", help="Print the video link instead of playing.")
    parser.add_argument("-e", "--edit", action="store_true", help="Edit the configuration file.")
    parser.add_argument("--clear-cache", action="store_true", help="Delete cached search results and exit.")
    parser.add_argument("--clear-history", action="store_true", help="Delete watch history and exit.")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to the terminal.")
    parser.add_argument("--version", action="store_true", help="Show version info and exit.")
    return parser


def determine_initial_state(args):
    if args.history:
        return STATE_HISTORY
    if args.feed:
        return STATE_FEED
    if args.subscribe:
        return STATE_SUBSCRIBE
    if args.unsubscribe:
        return STATE_UNSUBSCRIBE
    if args.query:
        return STATE_SEARCH
    return STATE_INIT


class App:
    def __init__(self, args, config, *, history, subscriptions, search, selector, input_fn=input):
        self.args = args
        self.config = config
        self.history = history
        self.subscriptions = subscriptions
        self.search = search
        self.selector = selector
        self._input = input_fn
        self.query = " ".join(args.query or []).strip()
        self.limit = args.limit if args.limit and args.limit > 0 else config["limit"]
        self.selected_video = None

    def _prompt(self, text):
        try:
            return self._input(f"{text}: ").strip()
        except EOFError:
            return ""

    def _pick_video(self, videos, prompt):
        items = [MenuItem(label=format_video_label(v), value=v) for v in videos]
        self.selected_video = self.selector.select(items, prompt)
        return STATE_PLAY if self.selected_video else STATE_EXIT

    def state_init(self):
        items = [
            MenuItem(label="Search YouTube", value=STATE_SEARCH),
            MenuItem(label="View your history", value=STATE_HISTORY),
            MenuItem(label="Add subscription", value=STATE_SUBSCRIBE),
            MenuItem(label="Remove subscription", value=STATE_UNSUBSCRIBE),
            MenuItem(label="View your feed", value=STATE_FEED),
        ]
        return self.selector.select(items, "Select Action") or STATE_EXIT

    def state_search(self):
        query = self.query or self._prompt("Search YouTube")
        if not query:
            return STATE_EXIT
        _say("Searching...")
        try:
            videos = self.search.search_videos(query, self.limit)
        except NoResults:
            _say(f"No results for {query!r}.")
            return STATE_EXIT
        return self._pick_video(videos, "Select Video")

    def state_history(self):
        entries = self.history.get_all()
        if not entries:
            _say("No history yet.")
            return STATE_EXIT
        return self._pick_video([e.video for e in entries], "Select from History")

    def state_feed(self):
        subscriptions = self.subscriptions.load()
        if not subscriptions:
            _say("No subscriptions yet. Add one with --subscribe.")
            return STATE_EXIT
        _say(f"Fetching feed from {len(subscriptions)} channels...")
        videos = self.search.fetch_feed(
            subscriptions,
            self.config["feed_limit_per_channel"],
            max_workers=self.config["feed_workers"],
        )
        if not videos:
            _say("Your feed is empty.")
            return STATE_EXIT
        return self._pick_video(videos, "Select from Feed")

    def state_subscribe(self):
        query = self.query or self._prompt("Search channel")
        if not query:
            return STATE_EXIT
        try:
            channels = self.search.search_channels(query, self.limit)
        except NoResults:
            _say(f"No channels found for {query!r}.")
            return STATE_EXIT
        items = [MenuItem(label=f"{c.name} ({c.handle})", value=c) for c in channels]
        channel = self.selector.select(items, "Select Channel")
        if channel is None:
            return STATE_EXIT
        self.subscriptions.add(channel.to_subscription())
        _say(f"Subscribed to {channel.name}.")
        return STATE_EXIT

    def state_unsubscribe(self):
        subscriptions = self.subscriptions.load()
        if not subscriptions:
            _say("No subscriptions yet.")
            return STATE_EXIT
        items = [MenuItem(label=f"{s.name} ({s.handle})", value=s) for s in subscriptions]
        subscription = self.selector.select(items, "Unsubscribe from")
        if subscription is None:
            return STATE_EXIT
        self.subscriptions.remove(subscription.handle)
        _say(f"Unsubscribed from {subscription.name}.")
        return STATE_EXIT

    def state_play(self):
        video = self.selected_video
        if video is None:
            return STATE_EXIT
        url = build_video_url(video.id)
        self.history.add(video)

        if self.args.copy_url:
            print(url)
            return STATE_EXIT

        with_video = self.args.video or self.config["video_mode"]
        if self.args.download:
            _say(f"Downloading: {video.title}")
            download(url, self.config["download_dir"], video=with_video)
            _say("Download complete!")
            if self.config["notify"]:
                notify(f"Downloaded {video.title}")
            return STATE_EXIT

        player_name = "syncplay" if self.args.syncplay else self.config["player"]
        _say(f"Playing: {video.title}")
        create_player(player_name).play(url, video=with_video)
        return STATE_EXIT

    def run(self, state=None):
        handlers = {
            STATE_INIT: self.state_init,
            STATE_SEARCH: self.state_search,
            STATE_HISTORY: self.state_history,
            STATE_FEED: self.state_feed,
            STATE_SUBSCRIBE: self.state_subscribe,
            STATE_UNSUBSCRIBE: self.state_unsubscribe,
            STATE_PLAY: self.state_play,
        }
        state = state or determine_initial_state(self.args)
        while state != STATE_EXIT:
            logging.debug("State: %s", state)
            state = handlers[state]()


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.version:
        print(json.dumps(get_runtime_info(), indent=2))
        return 0

    paths = build_app_paths()
    try:
        ensure_app_dirs(paths)
    except OSError as exc:
        _say(f"Error: cannot create app directories: {exc}")
        return 1
    try:
        _setup_logging(paths.log_path, verbose=args.verbose)
    except OSError as exc:
        _say(f"Error: cannot open log file {paths.log_path}: {exc}")
        return 1

    try:
        config = load_config(paths.config_path)
        if args.edit:
            edit_config(paths.config_path, config["editor"])
            return 0

        cache = SearchCache(paths.search_cache_dir)
        history = History(paths.history_path, max_entries=config["max_history_entries"])
        if args.clear_cache or args.clear_history:
            if args.clear_cache:
                cache.clear_all()
                _say("Search cache cleared.")
            if args.clear_history:
                history.clear()
                _say("History cleared.")
            return 0

        history.load()
        app = App(
            args,
            config,
            history=history,
            subscriptions=SubscriptionStore(paths.subscriptions_path),
            search=SearchService(
                PageFetcher(timeout=config["request_timeout"]),
                cache,
                ttl=config["cache_ttl"],
            ),
            selector=detect_selector(config["selector"]),
        )
        app.run()
    except KeyboardInterrupt:
        logging.warning("Interrupted")
        logging.shutdown()
        return 130
    except ConfigError as exc:
        _say(f"Error: {exc} (run with --edit to fix)")
        logging.error("%s", exc)
        return 1
    except YtChillError as exc:
        _say(f"Error: {exc}")
        logging.error("%s: %s", exc.code, exc)
        return 1
    logging.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
