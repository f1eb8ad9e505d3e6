import os
from dataclasses import dataclass
from pathlib import Path

APP_NAME = "yt-chill"


def _env_path(name, default):
    value = os.environ.get(name)
    if value:
        return os.path.abspath(os.path.expanduser(value))
    return os.path.abspath(os.path.expanduser(str(default)))


def _xdg_dir(app_env, xdg_env, fallback):
    # YT_CHILL_* beats XDG_*, which beats the home default.
    if os.environ.get(app_env):
        return _env_path(app_env, None)
    base = _env_path(xdg_env, Path.home() / fallback)
    return os.path.join(base, APP_NAME)


@dataclass(frozen=True)
class AppPaths:
    config_dir: str
    cache_dir: str
    state_dir: str
    config_path: str
    history_path: str
    subscriptions_path: str
    search_cache_dir: str
    log_path: str


def ensure_dir(path):
    if path:
        os.makedirs(path, exist_ok=True)


def default_download_dir():
    downloads = Path.home() / "Downloads"
    if downloads.is_dir():
        return str(downloads)
    return os.path.abspath(".")


def build_app_paths(config_dir=None, cache_dir=None, state_dir=None):
    config_dir = config_dir or _xdg_dir("YT_CHILL_CONFIG_DIR", "XDG_CONFIG_HOME", ".config")
    cache_dir = cache_dir or _xdg_dir("YT_CHILL_CACHE_DIR", "XDG_CACHE_HOME", ".cache")
    state_dir = state_dir or _xdg_dir("YT_CHILL_STATE_DIR", "XDG_STATE_HOME", os.path.join(".local", "state"))
    return AppPaths(
        config_dir=config_dir,
        cache_dir=cache_dir,
        state_dir=state_dir,
        config_path=os.path.join(config_dir, "config.json"),
        history_path=os.path.join(cache_dir, "history.json"),
        subscriptions_path=os.path.join(config_dir, "subscriptions.txt"),
        search_cache_dir=os.path.join(cache_dir, "search"),
        log_path=os.path.join(state_dir, "yt-chill.log"),
    )


def ensure_app_dirs(paths):
    ensure_dir(paths.config_dir)
    ensure_dir(paths.cache_dir)
    ensure_dir(paths.state_dir)
