import logging
import os

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError

from ytchill.errors import SpawnError, StorageError
from ytchill.paths import ensure_dir

OUTPUT_TEMPLATE = "%(title)s [%(id)s].%(ext)s"


def build_ytdlp_opts(output_dir, *, video=False, ytdl_format=None, progress_hook=None):
    opts = {
        "quiet": True,
        "noprogress": progress_hook is None,
        "outtmpl": os.path.join(output_dir, OUTPUT_TEMPLATE),
        "continuedl": True,
        "socket_timeout": 60,
        "retries": 5,
        "logger": logging.getLogger("yt_dlp"),
    }
    if video:
        opts["format"] = ytdl_format or "bestvideo*+bestaudio/best"
        opts["postprocessors"] = [
            {"key": "FFmpegVideoRemuxer", "preferedformat": "mp4"},
        ]
    else:
        # Audio-only by default: extract to MP3.
        opts["format"] = ytdl_format or "bestaudio/best"
        opts["postprocessors"] = [
            {"key": "FFmpegExtractAudio", "preferredcodec": "mp3", "preferredquality": "0"},
        ]
    if progress_hook:
        opts["progress_hooks"] = [progress_hook]
    return opts


def download(url, output_dir, *, video=False, ytdl_format=None, progress_hook=None):
    try:
        ensure_dir(output_dir)
    except OSError as exc:
        raise StorageError(f"Cannot create download directory {output_dir}: {exc}", path=output_dir) from exc
    opts = build_ytdlp_opts(output_dir, video=video, ytdl_format=ytdl_format, progress_hook=progress_hook)
    logging.info("Downloading %s to %s (video=%s)", url, output_dir, video)
    try:
        with YoutubeDL(opts) as ydl:
            result = ydl.download([url])
    except DownloadError as exc:
        raise SpawnError(f"yt-dlp download failed: {exc}") from exc
    if result:
        raise SpawnError(f"yt-dlp exited with code: {result}")
    logging.info("Download complete: %s", url)
