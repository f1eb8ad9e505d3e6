import logging

import requests

from ytchill.errors import NetworkError

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT_SECONDS = 15

# YouTube serves different markup (or a consent wall) without these.
_BROWSER_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept-Language": "en-US,en;q=0.9",
}


class PageFetcher:
    def __init__(self, session=None, timeout=DEFAULT_TIMEOUT_SECONDS):
        self._session = session or requests.Session()
        self._timeout = timeout

    def fetch(self, url):
        logging.info("Fetching %s", url)
        try:
            response = self._session.get(url, headers=_BROWSER_HEADERS, timeout=self._timeout)
        except requests.Timeout as exc:
            raise NetworkError(f"Request timed out after {self._timeout}s: {url}", url=url) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"Request failed: {exc}", url=url) from exc
        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"HTTP {response.status_code}: {url}",
                url=url,
                status_code=response.status_code,
            )
        return response.text
