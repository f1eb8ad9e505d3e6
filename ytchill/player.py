import logging
import shutil
import subprocess

from ytchill.errors import MissingDependency, SpawnError

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
# mpv exits with 4 when the user quits with "q".
_MPV_USER_QUIT = 4


def build_video_url(video_id):
    return WATCH_URL.format(video_id=video_id)


def _require(binary):
    path = shutil.which(binary)
    if not path:
        raise MissingDependency(binary)
    return path


def _run(cmd, **kwargs):
    try:
        return subprocess.run(cmd, check=False, **kwargs)
    except OSError as exc:
        raise SpawnError(f"Failed to start {cmd[0]}: {exc}") from exc


class Player:
    name = ""
    binary = ""

    def is_available(self):
        return shutil.which(self.binary) is not None

    def play(self, url, *, video=False, ytdl_format=None):
        raise NotImplementedError


class MpvPlayer(Player):
    name = "mpv"
    binary = "mpv"

    def build_args(self, url, *, video=False, ytdl_format=None):
        args = [self.binary, "--really-quiet"]
        if not video:
            args.append("--no-video")
        if ytdl_format:
            args.extend(["--ytdl-format", ytdl_format])
        args.append(url)
        return args

    def play(self, url, *, video=False, ytdl_format=None):
        _require(self.binary)
        args = self.build_args(url, video=video, ytdl_format=ytdl_format)
        logging.info("Starting mpv (video=%s): %s", video, url)
        # Inherit the terminal so mpv's keyboard controls work.
        result = _run(args, stderr=subprocess.DEVNULL)
        if result.returncode not in (0, _MPV_USER_QUIT):
            raise SpawnError(f"mpv exited with code: {result.returncode}")
        return result.returncode


class SyncplayPlayer(Player):
    name = "syncplay"
    binary = "syncplay"

    def play(self, url, *, video=True, ytdl_format=None):
        _require(self.binary)
        logging.info("Starting syncplay: %s", url)
        result = _run([self.binary, url])
        if result.returncode != 0:
            raise SpawnError(f"syncplay exited with code: {result.returncode}")
        return result.returncode


_PLAYERS = {
    "mpv": MpvPlayer,
    "syncplay": SyncplayPlayer,
}


def create_player(name):
    player_cls = _PLAYERS.get(name, MpvPlayer)
    return player_cls()
