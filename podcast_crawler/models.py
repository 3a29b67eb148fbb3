"""
Entities and transient crawl types.

Podcast and Episode mirror rows in the record store. ParsedFeed and
ParsedEntry only live for the duration of a single crawl call.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional


PODCAST_METADATA_FIELDS = (
    'title',
    'description',
    'language',
    'website',
    'itunes_owner_name',
    'itunes_owner_email',
    'itunes_explicit',
    'itunes_subtitle',
    'itunes_summary',
    'itunes_author',
    'itunes_image',
)

EPISODE_FIELDS = (
    'title',
    'description',
    'link_to_website',
    'guid',
    'publication_date',
    'enclosure_url',
    'enclosure_length',
    'enclosure_type',
    'itunes_explicit',
    'itunes_duration',
)

# Entry slots consulted for an episode description, highest priority first
DESCRIPTION_SLOTS = ('itunes_summary', 'content', 'summary')


@dataclass
class Podcast:
    """A podcast registered in the record store."""

    rss: str
    id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    website: Optional[str] = None
    itunes_owner_name: Optional[str] = None
    itunes_owner_email: Optional[str] = None
    itunes_explicit: Optional[bool] = None
    itunes_subtitle: Optional[str] = None
    itunes_summary: Optional[str] = None
    itunes_author: Optional[str] = None
    itunes_image: Optional[str] = None

    def metadata(self) -> Dict[str, Any]:
        """Return the mutable metadata fields as a dict."""
        return {name: getattr(self, name) for name in PODCAST_METADATA_FIELDS}


@dataclass
class Episode:
    """An episode belonging to exactly one podcast."""

    podcast_id: int
    guid: str
    id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    link_to_website: Optional[str] = None
    publication_date: Optional[datetime] = None
    enclosure_url: Optional[str] = None
    enclosure_length: Optional[str] = None
    enclosure_type: Optional[str] = None
    itunes_explicit: Optional[bool] = None
    itunes_duration: Optional[int] = None


@dataclass
class ParsedEntry:
    """
    One feed entry before normalization.

    The description slots are optional strings; exposed_fields says which of
    them the feed entry actually carried. A slot can be exposed with a None
    value (an empty element), which is different from not being exposed.
    """

    title: Optional[str] = None
    link: Optional[str] = None
    guid: Optional[str] = None
    published: Optional[str] = None
    published_parsed: Optional[time.struct_time] = None
    enclosure_url: Optional[str] = None
    enclosure_length: Optional[str] = None
    enclosure_type: Optional[str] = None
    itunes_explicit: Any = None
    itunes_duration: Any = None
    itunes_summary: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    exposed_fields: FrozenSet[str] = frozenset()

    def exposes(self, slot: str) -> bool:
        return slot in self.exposed_fields


@dataclass
class ParsedFeed:
    """Podcast-level metadata plus the ordered entries of one feed document."""

    podcast_metadata: Dict[str, Any]
    entries: List[ParsedEntry] = field(default_factory=list)
    format: Optional[str] = None


@dataclass
class IngestionReport:
    """Counts produced by one EpisodeIngester.ingest call."""

    created: int = 0
    skipped: int = 0
    failed: int = 0


@dataclass
class CrawlResult:
    """Outcome of one CrawlRunner operation."""

    operation: str
    podcast_id: Optional[int]
    podcast_title: Optional[str]
    error: Optional[BaseException] = None
    episodes_created: int = 0
    episodes_skipped: int = 0
    episodes_failed: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> Optional[str]:
        if self.error is None:
            return None
        return type(self.error).__name__
