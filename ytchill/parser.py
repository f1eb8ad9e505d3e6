import html

from ytchill.models import LIVE_DURATION, ChannelInfo, Video
from ytchill.tree import dig, dig_list, dig_str

_RESULT_ITEMS_PATH = (
    "contents",
    "twoColumnSearchResultsRenderer",
    "primaryContents",
    "sectionListRenderer",
    "contents",
    0,
    "itemSectionRenderer",
    "contents",
)


def result_items(data):
    """Flat list of result items from a search page, or [] if the path is gone."""
    return dig_list(data, *_RESULT_ITEMS_PATH) or []


def _last_thumbnail(renderer):
    thumbnails = dig_list(renderer, "thumbnail", "thumbnails")
    if not thumbnails:
        return ""
    # YouTube lists variants smallest first.
    return dig_str(thumbnails, -1, "url")


def parse_video_item(item):
    renderer = dig(item, "videoRenderer")
    if not isinstance(renderer, dict):
        return None
    video_id = dig(renderer, "videoId")
    if not isinstance(video_id, str) or not video_id:
        return None
    return Video(
        id=video_id,
        title=html.unescape(dig_str(renderer, "title", "runs", 0, "text")),
        author=dig_str(renderer, "longBylineText", "runs", 0, "text"),
        duration=dig_str(renderer, "lengthText", "simpleText", default=LIVE_DURATION),
        views=dig_str(renderer, "viewCountText", "simpleText"),
        published=dig_str(renderer, "publishedTimeText", "simpleText"),
        thumbnail=_last_thumbnail(renderer),
    )


def parse_channel_item(item):
    renderer = dig(item, "channelRenderer")
    if not isinstance(renderer, dict):
        return None
    name = html.unescape(dig_str(renderer, "title", "simpleText"))
    raw_id = dig_str(renderer, "channelId")
    # Heuristic: a subscriber count means the id is handle-shaped.
    if raw_id and dig(renderer, "subscriberCountText") is not None:
        handle = f"@{raw_id}"
    else:
        handle = raw_id
    if not name or not handle:
        return None
    return ChannelInfo(name=name, handle=handle)


def _collect(data, limit, parse_item):
    if limit <= 0:
        return []
    parsed = []
    for item in result_items(data):
        record = parse_item(item)
        if record is not None:
            parsed.append(record)
    return parsed[:limit]


def parse_videos(data, limit):
    return _collect(data, limit, parse_video_item)


def parse_channels(data, limit):
    return _collect(data, limit, parse_channel_item)
