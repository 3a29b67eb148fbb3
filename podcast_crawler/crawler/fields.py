"""
Field resolution for feed entries and podcast metadata.

Pure functions that turn the loosely-typed values found in feeds into the
shapes the record store expects. None of them touch the network or the
database.
"""

import time
from datetime import datetime, timezone
from typing import Any, Optional, Union
import pandas as pd
from podcast_crawler.errors import DurationFormatError
from podcast_crawler.models import DESCRIPTION_SLOTS, ParsedEntry
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)

# Multipliers for the seconds, minutes and hours segments, read right to left
DURATION_MULTIPLIERS = (1, 60, 3600)

EXPLICIT_TRUE_VALUES = {'yes', 'true', 'explicit'}
EXPLICIT_FALSE_VALUES = {'no', 'false', 'clean'}


def resolve_description(entry: ParsedEntry) -> Optional[str]:
    """
    Pick an episode description from the first description slot the entry exposes.

    Slots are tried in order: itunes_summary, content, summary. Whether a
    slot is exposed decides, not whether it holds a value: an entry that
    carries an empty itunes:summary element resolves to None even when it
    also has content.

    Parameters:
    entry: Parsed feed entry

    Returns:
    The description, or None when no slot is exposed

    Example:
        >>> entry = ParsedEntry(content='<p>Notes</p>', exposed_fields=frozenset({'content'}))
        >>> resolve_description(entry)
        '<p>Notes</p>'
    """
    for slot in DESCRIPTION_SLOTS:
        if entry.exposes(slot):
            return getattr(entry, slot)
    return None


def resolve_duration(value: Union[int, str, None]) -> Optional[int]:
    """
    Convert an itunes:duration value to a whole number of seconds.

    Accepts a non-negative integer, or a string of the form [[H:]MM:]SS where
    the rightmost segment is seconds, then minutes, then hours. A plain digit
    string is a number of seconds.

    Parameters:
    value: Raw duration from the feed

    Returns:
    int: Total seconds, or None when the entry declares no duration

    Raises:
    DurationFormatError: If the value has more than three segments, a
        non-numeric or negative segment, or is not an int or string

    Example:
        >>> resolve_duration('01:42:13')
        6133
        >>> resolve_duration('28:33')
        1713
    """
    if value is None:
        return None

    # bool is an int subclass; a boolean duration is a feed error, not 0 or 1 seconds
    if isinstance(value, bool):
        raise DurationFormatError(f"Invalid duration: {value!r}")

    if isinstance(value, int):
        if value < 0:
            raise DurationFormatError(f"Duration cannot be negative: {value}")
        return value

    if not isinstance(value, str):
        raise DurationFormatError(f"Unsupported duration type {type(value).__name__}: {value!r}")

    text = value.strip()
    if not text:
        return None

    segments = text.split(':')
    if len(segments) > len(DURATION_MULTIPLIERS):
        raise DurationFormatError(f"Duration has more than {len(DURATION_MULTIPLIERS)} segments: {value!r}")

    total = 0
    for multiplier, segment in zip(DURATION_MULTIPLIERS, reversed(segments)):
        segment = segment.strip()
        if not segment.isdecimal():
            raise DurationFormatError(f"Invalid duration segment {segment!r} in {value!r}")
        total += multiplier * int(segment)
    return total


def resolve_explicit(value: Any) -> Optional[bool]:
    """
    Normalize an itunes:explicit declaration to a boolean.

    Booleans pass through unchanged. Raw strings follow the iTunes
    vocabulary: yes/true/explicit are True, no/false/clean are False.

    Returns:
    bool, or None when the feed does not declare the flag (or declares
    something unrecognized)
    """
    if value is None or isinstance(value, bool):
        return value

    text = str(value).strip().lower()
    if text in EXPLICIT_TRUE_VALUES:
        return True
    if text in EXPLICIT_FALSE_VALUES:
        return False

    if text:
        logger.debug(f"Unrecognized itunes:explicit value {value!r}")
    return None


def resolve_publication_date(published_parsed: Optional[time.struct_time] = None,
                             published: Optional[str] = None) -> Optional[datetime]:
    """
    Turn a feed timestamp into a timezone-aware UTC datetime.

    feedparser already normalizes the dates it understands to a UTC
    struct_time; that is used first. The raw string is the fallback.

    Parameters:
    published_parsed: UTC struct_time from feedparser
    published: Raw timestamp string from the feed

    Returns:
    datetime in UTC, or None if neither input can be interpreted
    """
    if published_parsed:
        return datetime(*published_parsed[:6], tzinfo=timezone.utc)

    if not published:
        return None

    try:
        timestamp = pd.to_datetime(published, utc=True)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Failed to parse publication date '{published}': {e}")
        return None

    if pd.isna(timestamp):
        return None
    return timestamp.to_pydatetime()
