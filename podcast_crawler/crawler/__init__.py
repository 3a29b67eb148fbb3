"""
Feed crawler: fetch, parse, normalize and ingest podcast feeds.
"""

from podcast_crawler.crawler.fetcher import FeedFetcher
from podcast_crawler.crawler.parser import FeedParser, read_raw_fields
from podcast_crawler.crawler.fields import (
    resolve_description,
    resolve_duration,
    resolve_explicit,
    resolve_publication_date
)
from podcast_crawler.crawler.synchronizer import PodcastSynchronizer, build_podcast_attributes
from podcast_crawler.crawler.ingester import EpisodeIngester, build_episode_attributes
from podcast_crawler.crawler.runner import (
    CrawlRunner,
    crawl_podcast,
    report_failure,
    PODCAST_INFO,
    EPISODES_INFO
)

__all__ = [
    'FeedFetcher',
    'FeedParser',
    'read_raw_fields',
    'resolve_description',
    'resolve_duration',
    'resolve_explicit',
    'resolve_publication_date',
    'PodcastSynchronizer',
    'build_podcast_attributes',
    'EpisodeIngester',
    'build_episode_attributes',
    'CrawlRunner',
    'crawl_podcast',
    'report_failure',
    'PODCAST_INFO',
    'EPISODES_INFO',
]
