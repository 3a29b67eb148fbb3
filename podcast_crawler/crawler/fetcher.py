"""
Feed retrieval over HTTP(S).
"""

import traceback
from typing import Optional
import requests
from podcast_crawler import config
from podcast_crawler.errors import FetchError
from podcast_crawler.validation import validate_feed_url
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)


class FeedFetcher:
    """
    Downloads raw feed documents.

    One fetch() is one GET request; there is no retry and no cache.

    Parameters:
    session: requests.Session to send requests through (a new one if omitted)
    timeout: Request timeout in seconds (defaults to config.FETCH_TIMEOUT)

    A passed-in session keeps its own User-Agent unless it is still the
    requests default. Use the fetcher as a context manager, or call close(),
    to release the session's connection pool.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = None):
        if session is None:
            session = requests.Session()
            session.headers['User-Agent'] = config.USER_AGENT
        elif session.headers.get('User-Agent') == requests.utils.default_user_agent():
            session.headers['User-Agent'] = config.USER_AGENT
        self.session = session
        self.timeout = timeout if timeout is not None else config.FETCH_TIMEOUT

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> 'FeedFetcher':
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback) -> None:
        self.close()

    def fetch(self, url: str) -> bytes:
        """
        Download a feed document.

        Parameters:
        url: Absolute http(s) URL of the feed

        Returns:
        bytes: Response body

        Raises:
        FetchError: If the URL is invalid, the request fails or times out,
            or the server answers with a non-2xx status
        """
        is_valid, error = validate_feed_url(url)
        if not is_valid:
            raise FetchError(f"Invalid RSS feed URL '{url}': {error}")

        try:
            logger.debug(f"Downloading feed: {url}")
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            logger.debug(traceback.format_exc())
            raise FetchError(f"Timeout fetching feed {url}") from e
        except requests.HTTPError as e:
            raise FetchError(f"HTTP error fetching feed {url}: {e}") from e
        except requests.RequestException as e:
            logger.debug(traceback.format_exc())
            raise FetchError(f"Failed to download feed {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise FetchError(f"Unexpected HTTP status {response.status_code} fetching feed {url}")

        content = response.content
        logger.info(f"Fetched feed: {url} ({len(content):,} bytes)")
        return content
