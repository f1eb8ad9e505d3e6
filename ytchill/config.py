import json
import logging
import os
import shutil
import subprocess

from ytchill.errors import ConfigError, MissingDependency
from ytchill.fileio import atomic_write_json
from ytchill.paths import default_download_dir

PLAYERS = {"mpv", "syncplay"}
SELECTORS = {"fzf", "prompt"}

DEFAULT_CONFIG = {
    "limit": 15,
    "video_mode": False,
    "download_dir": "",
    "max_history_entries": 100,
    "cache_ttl": 3600,
    "editor": "nvim",
    "player": "mpv",
    "selector": "fzf",
    "notify": True,
    "request_timeout": 15,
    "feed_workers": 4,
    "feed_limit_per_channel": 5,
}

_POSITIVE_INT_KEYS = {"limit", "max_history_entries", "feed_workers", "feed_limit_per_channel"}
_NON_NEGATIVE_INT_KEYS = {"cache_ttl"}
_BOOL_KEYS = {"video_mode", "notify"}
_STRING_KEYS = {"download_dir", "editor"}


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config):
    errors = []
    if not isinstance(config, dict):
        return ["config must be a JSON object"]

    for key in _POSITIVE_INT_KEYS:
        if key in config and (not _is_int(config[key]) or config[key] < 1):
            errors.append(f"{key} must be a positive integer")
    for key in _NON_NEGATIVE_INT_KEYS:
        if key in config and (not _is_int(config[key]) or config[key] < 0):
            errors.append(f"{key} must be a non-negative integer")
    for key in _BOOL_KEYS:
        if key in config and not isinstance(config[key], bool):
            errors.append(f"{key} must be true or false")
    for key in _STRING_KEYS:
        if key in config and not isinstance(config[key], str):
            errors.append(f"{key} must be a string")

    timeout = config.get("request_timeout")
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
        errors.append("request_timeout must be a positive number")
    player = config.get("player")
    if player is not None and player not in PLAYERS:
        errors.append(f"player must be one of: {', '.join(sorted(PLAYERS))}")
    selector = config.get("selector")
    if selector is not None and selector not in SELECTORS:
        errors.append(f"selector must be one of: {', '.join(sorted(SELECTORS))}")
    return errors


def normalize_config(config):
    """Defaults overlaid with every valid user value; invalid values are dropped."""
    normalized = dict(DEFAULT_CONFIG)
    if os.environ.get("EDITOR"):
        normalized["editor"] = os.environ["EDITOR"]
    if not isinstance(config, dict):
        config = {}
    for key in DEFAULT_CONFIG:
        if key not in config:
            continue
        if validate_config({key: config[key]}):
            logging.warning("Ignoring invalid config value for %s: %r", key, config[key])
            continue
        normalized[key] = config[key]
    if not normalized["download_dir"]:
        normalized["download_dir"] = default_download_dir()
    else:
        normalized["download_dir"] = os.path.abspath(os.path.expanduser(normalized["download_dir"]))
    return normalized


def read_config_file(path):
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except ValueError as exc:
        raise ConfigError(f"{path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc


def load_config(path):
    return normalize_config(read_config_file(path))


def save_config(path, config):
    atomic_write_json(path, config, indent=4)


def edit_config(path, editor):
    if not os.path.exists(path):
        save_config(path, DEFAULT_CONFIG)
    command = (editor or "").split()
    if not command or not shutil.which(command[0]):
        raise MissingDependency(command[0] if command else "editor")
    subprocess.run([*command, path], check=False)
    errors = validate_config(read_config_file(path))
    for error in errors:
        logging.warning("Config problem after edit: %s", error)
    return errors
