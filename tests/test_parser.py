import json
import unittest

from ytchill.errors import ParseError
from ytchill.initial_data import extract_initial_data
from ytchill.models import LIVE_DURATION, Video
from ytchill.parser import parse_channels, parse_videos
from ytchill.tree import dig, dig_list, dig_str

from page_fixtures import ad_item, channel_item, initial_data, search_page, shelf_item, video_item


class TreeTests(unittest.TestCase):
    def test_dig_walks_dicts_and_lists(self):
        tree = {"a": [{"b": "x"}, {"b": "y"}]}
        self.assertEqual(dig(tree, "a", 1, "b"), "y")
        self.assertEqual(dig(tree, "a", -1, "b"), "y")

    def test_dig_missing_steps(self):
        tree = {"a": [{"b": "x"}]}
        self.assertIsNone(dig(tree, "a", 5, "b"))
        self.assertIsNone(dig(tree, "a", "b"))
        self.assertIsNone(dig(tree, "z"))
        self.assertEqual(dig("scalar", "a", default="fallback"), "fallback")

    def test_typed_helpers(self):
        tree = {"n": 3, "s": "text", "l": [1]}
        self.assertEqual(dig_str(tree, "n"), "")
        self.assertEqual(dig_str(tree, "s"), "text")
        self.assertEqual(dig_list(tree, "l"), [1])
        self.assertIsNone(dig_list(tree, "s"))


class InitialDataTests(unittest.TestCase):
    def test_extracts_first_blob(self):
        data = initial_data([video_item("abc")])
        self.assertEqual(extract_initial_data(search_page(data)), data)

    def test_missing_marker(self):
        with self.assertRaises(ParseError) as ctx:
            extract_initial_data("<html><script>var other = {};</script></html>")
        self.assertEqual(ctx.exception.cause, "marker_not_found")
        self.assertIn("Failed to find ytInitialData", str(ctx.exception))

    def test_invalid_json(self):
        with self.assertRaises(ParseError) as ctx:
            extract_initial_data("<script>var ytInitialData = {not json};</script>")
        self.assertEqual(ctx.exception.cause, "invalid_json")
        self.assertIn("Failed to parse ytInitialData", str(ctx.exception))

    def test_non_greedy_stops_at_first_script_end(self):
        data = {"k": "v"}
        html = (
            f"<script>var ytInitialData = {json.dumps(data)};</script>"
            "<script>var trailing = {\"x\": 1};</script>"
        )
        self.assertEqual(extract_initial_data(html), data)


class ParseVideosTests(unittest.TestCase):
    def test_full_item(self):
        data = initial_data([video_item("abc", "Lofi &amp; Chill", duration="1:02:03")])
        videos = parse_videos(data, 10)
        self.assertEqual(len(videos), 1)
        video = videos[0]
        self.assertEqual(video.id, "abc")
        self.assertEqual(video.title, "Lofi & Chill")
        self.assertEqual(video.author, "Author")
        self.assertEqual(video.duration, "1:02:03")
        self.assertEqual(video.views, "1.2M views")
        self.assertEqual(video.published, "2 days ago")
        self.assertEqual(video.thumbnail, "https://i.ytimg.com/vi/abc/hq720.jpg")

    def test_missing_path_yields_empty(self):
        self.assertEqual(parse_videos({}, 10), [])
        self.assertEqual(parse_videos({"contents": {"twoColumnSearchResultsRenderer": {}}}, 10), [])
        self.assertEqual(parse_videos([], 10), [])

    def test_missing_duration_is_live(self):
        videos = parse_videos(initial_data([video_item("live1", duration=None)]), 10)
        self.assertEqual(videos[0].duration, LIVE_DURATION)

    def test_empty_duration_survives_cache_round_trip(self):
        video = parse_videos(initial_data([video_item("e1", duration="")]), 10)[0]
        self.assertEqual(video.duration, "")
        self.assertEqual(Video.from_dict(json.loads(json.dumps(video.to_dict()))), video)
        self.assertEqual(Video.from_dict({"id": "x"}).duration, LIVE_DURATION)

    def test_missing_id_is_dropped(self):
        data = initial_data([video_item(None), video_item("kept")])
        self.assertEqual([v.id for v in parse_videos(data, 10)], ["kept"])

    def test_missing_optional_fields(self):
        data = initial_data([{"videoRenderer": {"videoId": "bare"}}])
        video = parse_videos(data, 10)[0]
        self.assertEqual(video.title, "")
        self.assertEqual(video.author, "")
        self.assertEqual(video.views, "")
        self.assertEqual(video.published, "")
        self.assertEqual(video.thumbnail, "")
        self.assertEqual(video.duration, LIVE_DURATION)

    def test_skips_non_video_items_and_truncates_after_filtering(self):
        data = initial_data([
            ad_item(),
            video_item("a"),
            shelf_item(),
            channel_item("UC1", "Channel"),
            video_item("b"),
            video_item("c"),
        ])
        self.assertEqual([v.id for v in parse_videos(data, 2)], ["a", "b"])
        self.assertEqual([v.id for v in parse_videos(data, 10)], ["a", "b", "c"])
        self.assertEqual(parse_videos(data, 0), [])


class ParseChannelsTests(unittest.TestCase):
    def test_handle_prefixed_when_subscriber_count_present(self):
        data = initial_data([
            channel_item("lofigirl", "Lofi Girl"),
            channel_item("UCabc", "No Subs", subscribers=None),
        ])
        channels = parse_channels(data, 10)
        self.assertEqual([(c.name, c.handle) for c in channels], [
            ("Lofi Girl", "@lofigirl"),
            ("No Subs", "UCabc"),
        ])

    def test_drops_channels_missing_name_or_id(self):
        data = initial_data([
            channel_item("", "Nameless id"),
            channel_item("someid", ""),
            {"channelRenderer": {"channelId": "x"}},
            video_item("vid"),
            channel_item("good", "Good"),
        ])
        self.assertEqual([c.handle for c in parse_channels(data, 10)], ["@good"])

    def test_limit(self):
        data = initial_data([channel_item(f"c{i}", f"Channel {i}") for i in range(5)])
        self.assertEqual(len(parse_channels(data, 3)), 3)
