"""
Episode ingestion: parsed feed entries to stored episodes.
"""

import traceback
from typing import Any, Dict, Iterable
from podcast_crawler import config
from podcast_crawler.crawler.fields import (
    resolve_description,
    resolve_duration,
    resolve_explicit,
    resolve_publication_date,
)
from podcast_crawler.database.store import RecordStore
from podcast_crawler.errors import ParseError
from podcast_crawler.models import IngestionReport, ParsedEntry, Podcast
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)


def build_episode_attributes(entry: ParsedEntry) -> Dict[str, Any]:
    """
    Map a parsed feed entry to episode attributes.

    Description and duration are normalized; the other fields pass through
    as the feed declares them.

    Parameters:
    entry: Parsed feed entry

    Returns:
    dict: Episode attributes keyed by store field name

    Raises:
    ParseError: If the entry has no identifier
    DurationFormatError: If the entry's duration cannot be converted
    """
    if not entry.guid:
        raise ParseError(f"Feed entry '{entry.title}' has no guid/id")

    return {
        'title': entry.title,
        'description': resolve_description(entry),
        'link_to_website': entry.link,
        'guid': entry.guid,
        'publication_date': resolve_publication_date(entry.published_parsed, entry.published),
        'enclosure_url': entry.enclosure_url,
        'enclosure_length': entry.enclosure_length,
        'enclosure_type': entry.enclosure_type,
        'itunes_explicit': resolve_explicit(entry.itunes_explicit),
        'itunes_duration': resolve_duration(entry.itunes_duration),
    }


class EpisodeIngester:
    """
    Creates one episode per feed entry, in feed order.

    By default every entry produces a creation request and the first
    failure propagates, aborting the rest of the feed.

    Parameters:
    store: Record store to create episodes in
    skip_invalid_entries: Log and count a failing entry instead of raising
    dedupe_by_guid: Skip entries whose guid the podcast already has
    """

    def __init__(self, store: RecordStore, skip_invalid_entries: bool = None, dedupe_by_guid: bool = None):
        self.store = store
        self.skip_invalid_entries = (
            config.SKIP_INVALID_ENTRIES if skip_invalid_entries is None else skip_invalid_entries
        )
        self.dedupe_by_guid = config.DEDUPE_BY_GUID if dedupe_by_guid is None else dedupe_by_guid

    def ingest(self, podcast: Podcast, entries: Iterable[ParsedEntry]) -> IngestionReport:
        """
        Create one episode per feed entry, in feed order.

        Parameters:
        podcast: Stored podcast the episodes belong to
        entries: Parsed feed entries

        Returns:
        IngestionReport with the created, skipped and failed counts

        Raises:
        ParseError: If an entry has no identifier
        DurationFormatError: If an entry's duration cannot be converted
        PersistenceError: If the store cannot write an episode

        None of these propagate when skip_invalid_entries is on; the entry is
        then logged, counted as failed and skipped. Episodes created before a
        raised error stay stored.
        """
        report = IngestionReport()

        for position, entry in enumerate(entries, 1):
            try:
                attributes = build_episode_attributes(entry)
                if self.dedupe_by_guid and self.store.episode_exists(podcast, attributes['guid']):
                    logger.debug(f"Skipping entry {position}: guid {attributes['guid']} already stored")
                    report.skipped += 1
                    continue
                self.store.create_episode(podcast, attributes)
            except Exception as e:
                if not self.skip_invalid_entries:
                    raise
                report.failed += 1
                logger.warning(f"Skipping entry {position} ('{entry.title}') of podcast {podcast.id}: {type(e).__name__}: {e}")
                logger.debug(traceback.format_exc())
                continue
            report.created += 1

        logger.info(
            f"Ingested podcast {podcast.id}: {report.created} created, "
            f"{report.skipped} skipped, {report.failed} failed"
        )
        return report
