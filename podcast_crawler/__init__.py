"""
podcast-crawler - The feed crawler behind a podcast search application.

This package provides functionality to:
- Fetch podcast RSS/Atom feeds over HTTP(S)
- Parse and normalize heterogeneous feed fields (descriptions, durations, explicit flags, dates)
- Synchronize podcast metadata and ingest episodes into a SQLite record store
- Isolate failures so one bad feed never stops a batch crawl
"""

__version__ = '1.0.0'

# Import config
from podcast_crawler import config

# Import logging configuration (ensures logging is configured on import)
from podcast_crawler.logging_config import (
    setup_logging,
    get_logger,
    configure_logging
)

# Import errors and models
from podcast_crawler.errors import (
    CrawlerError,
    FetchError,
    ParseError,
    DurationFormatError,
    PersistenceError,
    ValidationError
)
from podcast_crawler.models import (
    Podcast,
    Episode,
    ParsedEntry,
    ParsedFeed,
    IngestionReport,
    CrawlResult,
    PODCAST_METADATA_FIELDS,
    EPISODE_FIELDS
)
from podcast_crawler.validation import validate_feed_url, read_feeds_file

# Import database modules
from podcast_crawler.database import (
    is_valid_database,
    get_db_connection,
    RecordStore,
    SQLiteRecordStore
)

# Import crawler modules
from podcast_crawler.crawler import (
    FeedFetcher,
    FeedParser,
    resolve_description,
    resolve_duration,
    resolve_explicit,
    resolve_publication_date,
    PodcastSynchronizer,
    EpisodeIngester,
    CrawlRunner,
    crawl_podcast,
    report_failure
)
from podcast_crawler.summary import summarise_crawl, crawl_totals, failures_by_error

__all__ = [
    # Config
    'config',
    # Logging
    'setup_logging',
    'get_logger',
    'configure_logging',
    # Errors
    'CrawlerError',
    'FetchError',
    'ParseError',
    'DurationFormatError',
    'PersistenceError',
    'ValidationError',
    # Models
    'Podcast',
    'Episode',
    'ParsedEntry',
    'ParsedFeed',
    'IngestionReport',
    'CrawlResult',
    'PODCAST_METADATA_FIELDS',
    'EPISODE_FIELDS',
    # Validation
    'validate_feed_url',
    'read_feeds_file',
    # Database
    'is_valid_database',
    'get_db_connection',
    'RecordStore',
    'SQLiteRecordStore',
    # Crawler
    'FeedFetcher',
    'FeedParser',
    'resolve_description',
    'resolve_duration',
    'resolve_explicit',
    'resolve_publication_date',
    'PodcastSynchronizer',
    'EpisodeIngester',
    'CrawlRunner',
    'crawl_podcast',
    'report_failure',
    # Summary
    'summarise_crawl',
    'crawl_totals',
    'failures_by_error',
]
