import json
import re

from ytchill.errors import ParseError

# Non-greedy up to the first closing script tag; the payload never contains one.
_INITIAL_DATA_RE = re.compile(r"var ytInitialData = (.+?);</script>", re.DOTALL)


def extract_initial_data(html):
    match = _INITIAL_DATA_RE.search(html or "")
    if not match:
        raise ParseError("Failed to find ytInitialData", cause="marker_not_found")
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise ParseError(f"Failed to parse ytInitialData: {exc}", cause="invalid_json") from exc
