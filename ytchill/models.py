from dataclasses import asdict, dataclass

LIVE_DURATION = "LIVE"


def _text(value):
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class Video:
    id: str
    title: str = ""
    author: str = ""
    # "3:45", "1:23:45" or LIVE_DURATION
    duration: str = LIVE_DURATION
    # Display strings straight from YouTube, e.g. "1.2M views", "2 days ago"
    views: str = ""
    published: str = ""
    thumbnail: str = ""

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=_text(data["id"]),
            title=_text(data.get("title")),
            author=_text(data.get("author")),
            duration=_text(data.get("duration", LIVE_DURATION)),
            views=_text(data.get("views")),
            published=_text(data.get("published")),
            thumbnail=_text(data.get("thumbnail")),
        )


@dataclass(frozen=True)
class HistoryEntry:
    video: Video
    # Unix seconds when the video was played
    timestamp: int

    def to_dict(self):
        # Stored flattened: video fields and timestamp side by side.
        data = self.video.to_dict()
        data["timestamp"] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(video=Video.from_dict(data), timestamp=int(data.get("timestamp") or 0))


@dataclass(frozen=True)
class ChannelInfo:
    name: str
    # "@handle" or a raw channel id
    handle: str

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(name=_text(data["name"]), handle=_text(data["handle"]))

    def to_subscription(self):
        return Subscription(name=self.name, handle=self.handle)


@dataclass(frozen=True)
class Subscription:
    name: str
    handle: str


@dataclass(frozen=True)
class MenuItem:
    label: str
    value: object
