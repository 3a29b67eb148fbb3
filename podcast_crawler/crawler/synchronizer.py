"""
Podcast metadata synchronization.
"""

from typing import Any, Dict, List
from podcast_crawler.crawler.fields import resolve_explicit
from podcast_crawler.database.store import RecordStore
from podcast_crawler.models import Podcast, PODCAST_METADATA_FIELDS
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)


def build_podcast_attributes(podcast_metadata: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the full set of podcast metadata fields from parsed feed metadata.

    Every field is present in the result; fields the feed does not declare
    are None.
    """
    attributes = {name: podcast_metadata.get(name) for name in PODCAST_METADATA_FIELDS}
    attributes['itunes_explicit'] = resolve_explicit(attributes['itunes_explicit'])
    return attributes


class PodcastSynchronizer:
    """
    Writes freshly parsed feed metadata onto a stored podcast.

    All eleven metadata fields go out in one update call on every sync, even
    when nothing changed.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def sync(self, podcast: Podcast, podcast_metadata: Dict[str, Any]) -> List[str]:
        """
        Write parsed feed metadata onto the podcast.

        Parameters:
        podcast: Stored podcast to update
        podcast_metadata: Metadata dict from a ParsedFeed

        Returns:
        Names of the fields whose value differs from the podcast's previous value
        """
        previous = podcast.metadata()
        attributes = build_podcast_attributes(podcast_metadata)
        changed = [name for name in PODCAST_METADATA_FIELDS if previous[name] != attributes[name]]
        self.store.update_podcast(podcast, attributes)
        logger.info(
            f"Synchronized metadata for podcast {podcast.id} ('{attributes['title']}'): "
            f"{len(changed)} of {len(PODCAST_METADATA_FIELDS)} fields changed"
        )
        return changed
