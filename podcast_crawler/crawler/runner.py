"""
Crawl orchestration for a single podcast.

CrawlRunner is the failure boundary of the crawler: whatever goes wrong while
fetching, parsing, normalizing or writing is caught here, reported, and turned
into a failed CrawlResult, so a batch driver can move on to the next podcast.
"""

import sys
import traceback
from typing import Callable, Optional, TextIO, Tuple
from podcast_crawler.crawler.fetcher import FeedFetcher
from podcast_crawler.crawler.ingester import EpisodeIngester
from podcast_crawler.crawler.parser import FeedParser
from podcast_crawler.crawler.synchronizer import PodcastSynchronizer
from podcast_crawler.database.store import RecordStore, SQLiteRecordStore
from podcast_crawler.models import CrawlResult, ParsedFeed, Podcast
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)

PODCAST_INFO = 'podcast_info'
EPISODES_INFO = 'episodes_info'


def report_failure(result: CrawlResult, stream: Optional[TextIO] = None) -> None:
    """
    Write the two-line failure report: the error class name, then the podcast title.

    Parameters:
    result: Failed crawl result
    stream: Where to write (defaults to the current sys.stdout)
    """
    stream = stream or sys.stdout
    stream.write(f"{result.error_kind}\n{result.podcast_title or ''}\n")
    stream.flush()


class CrawlRunner:
    """
    Crawls one podcast's feed.

    The two operations are independent: each fetches and parses the feed
    itself and neither raises.

    Parameters:
    podcast: The stored podcast to crawl
    store: Record store (defaults to a SQLiteRecordStore on config.DB_PATH)
    fetcher: FeedFetcher to download the feed with (a new one, closed by close(), if omitted)
    parser: FeedParser to parse it with
    report_stream: Stream for failure reports (defaults to sys.stdout at report time)
    skip_invalid_entries: Passed to EpisodeIngester
    dedupe_by_guid: Passed to EpisodeIngester

    Example:
        >>> runner = CrawlRunner(podcast)
        >>> result = runner.update_podcast_episodes_info()
        >>> result.ok
        True
    """

    def __init__(self, podcast: Podcast, store: RecordStore = None, fetcher: FeedFetcher = None,
                 parser: FeedParser = None, report_stream: Optional[TextIO] = None,
                 skip_invalid_entries: bool = None, dedupe_by_guid: bool = None):
        self.podcast = podcast
        self.store = store if store is not None else SQLiteRecordStore()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher if fetcher is not None else FeedFetcher()
        self.parser = parser or FeedParser()
        self.report_stream = report_stream
        self.synchronizer = PodcastSynchronizer(self.store)
        self.ingester = EpisodeIngester(
            self.store,
            skip_invalid_entries=skip_invalid_entries,
            dedupe_by_guid=dedupe_by_guid,
        )

    def close(self) -> None:
        """Close the fetcher if this runner created it."""
        if self._owns_fetcher:
            self.fetcher.close()

    def update_podcast_info(self) -> CrawlResult:
        """Fetch the feed and overwrite the podcast's metadata from it."""
        return self._run(PODCAST_INFO, self._sync_podcast_info)

    def update_podcast_episodes_info(self) -> CrawlResult:
        """Fetch the feed and create an episode for each of its entries."""
        return self._run(EPISODES_INFO, self._ingest_episodes)

    def _fetch_and_parse(self) -> ParsedFeed:
        raw = self.fetcher.fetch(self.podcast.rss)
        return self.parser.parse(raw)

    def _sync_podcast_info(self, result: CrawlResult) -> None:
        feed = self._fetch_and_parse()
        self.synchronizer.sync(self.podcast, feed.podcast_metadata)

    def _ingest_episodes(self, result: CrawlResult) -> None:
        feed = self._fetch_and_parse()
        report = self.ingester.ingest(self.podcast, feed.entries)
        result.episodes_created = report.created
        result.episodes_skipped = report.skipped
        result.episodes_failed = report.failed

    def _run(self, operation: str, step: Callable[[CrawlResult], None]) -> CrawlResult:
        result = CrawlResult(
            operation=operation,
            podcast_id=self.podcast.id,
            podcast_title=self.podcast.title,
        )
        try:
            step(result)
        except Exception as e:
            result.error = e
            result.podcast_title = self.podcast.title
            logger.error(
                f"{operation} failed for podcast {self.podcast.id} ('{self.podcast.title}'): "
                f"{type(e).__name__}: {e}"
            )
            logger.debug(traceback.format_exc())
            report_failure(result, self.report_stream)
            return result

        result.podcast_title = self.podcast.title
        logger.debug(f"{operation} finished for podcast {self.podcast.id}")
        return result


def crawl_podcast(podcast: Podcast, operations: Tuple[str, ...] = (PODCAST_INFO, EPISODES_INFO),
                  **runner_options) -> list:
    """
    Run the requested operations for one podcast, metadata first.

    Parameters:
    podcast: The stored podcast to crawl
    operations: Any of PODCAST_INFO and EPISODES_INFO
    runner_options: Keyword arguments for CrawlRunner

    Returns:
    list of CrawlResult, one per operation
    """
    runner = CrawlRunner(podcast, **runner_options)
    results = []
    try:
        if PODCAST_INFO in operations:
            results.append(runner.update_podcast_info())
        if EPISODES_INFO in operations:
            results.append(runner.update_podcast_episodes_info())
    finally:
        runner.close()
    return results
