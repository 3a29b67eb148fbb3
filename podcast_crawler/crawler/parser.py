"""
Feed parsing: raw RSS 2.0 / Atom bytes to a ParsedFeed.

feedparser does the heavy lifting (dialect detection, identifiers, links,
enclosures, date normalization). It does, however, fold several iTunes
elements into shared keys: itunes:summary and <description> both land in
'summary', itunes:subtitle and <description> both land in 'subtitle', and
itunes:explicit values other than 'yes'/'clean' become None. To keep those
fields apart the document is also read with ElementTree, collecting the
direct children of the channel and of every item verbatim. An <rss> document
that ElementTree cannot read, or whose item count disagrees with feedparser, is
rejected with ParseError. Atom and RDF (RSS 0.90/1.0) feeds have no such
folding and fall back to the feedparser values.
"""

import traceback
import xml.etree.ElementTree as ET  # nosec B405
from typing import Any, Dict, List, Optional, Tuple
import feedparser
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring as safe_fromstring, ParseError as XMLParseError
from podcast_crawler.errors import ParseError
from podcast_crawler.models import ParsedEntry, ParsedFeed
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)

ITUNES_NAMESPACE = 'http://www.itunes.com/dtds/podcast-1.0.dtd'
CONTENT_NAMESPACE = 'http://purl.org/rss/1.0/modules/content/'
ATOM_NAMESPACE = 'http://www.w3.org/2005/Atom'

# feedparser versions whose root is rdf:RDF rather than <rss>
RDF_FORMATS = ('rss090', 'rss10')


def _split_tag(tag: str) -> Tuple[str, str]:
    """Split an ElementTree tag into (lowercased namespace, local name)."""
    if tag.startswith('{'):
        namespace, _, name = tag[1:].partition('}')
        return namespace.lower(), name
    return '', tag


def _child_fields(element: ET.Element) -> Dict[str, Optional[str]]:
    """
    Collect the iTunes, content:encoded and plain description children of an element.

    A key is present when the element was found, even if it was empty; the
    first occurrence wins.
    """
    fields = {}
    for child in element:
        if not isinstance(child.tag, str):
            continue  # comments and processing instructions
        namespace, name = _split_tag(child.tag)

        if namespace == ITUNES_NAMESPACE:
            if name == 'image':
                fields.setdefault('itunes_image', child.get('href') or child.get('url'))
            elif name == 'owner':
                for owner_child in child:
                    if not isinstance(owner_child.tag, str):
                        continue
                    owner_namespace, owner_name = _split_tag(owner_child.tag)
                    if owner_namespace == ITUNES_NAMESPACE and owner_name in ('name', 'email'):
                        fields.setdefault(f'itunes_owner_{owner_name}', owner_child.text)
            else:
                fields.setdefault(f'itunes_{name}', child.text)
        elif namespace == CONTENT_NAMESPACE and name == 'encoded':
            fields.setdefault('content', child.text)
        elif namespace == '' and name == 'description':
            fields.setdefault('description', child.text)
    return fields


def read_raw_fields(raw: bytes) -> Tuple[Optional[Dict[str, Optional[str]]], Optional[List[Dict[str, Optional[str]]]]]:
    """
    Read channel-level and per-item fields straight from the XML.

    Parameters:
    raw: Feed document bytes

    Returns:
    (channel_fields, item_fields) where item_fields follows document order,
    or (None, None) if the document is not well-formed XML or is neither
    RSS 2.0 nor Atom
    """
    try:
        root = safe_fromstring(raw)
    except (XMLParseError, DefusedXmlException) as e:
        logger.debug(f"ElementTree could not read feed: {e}")
        return None, None

    namespace, name = _split_tag(root.tag)
    if namespace == '' and name == 'rss':
        channel = root.find('channel')
        if channel is None:
            return None, None
        items = list(root.iter('item'))
    elif namespace == ATOM_NAMESPACE and name == 'feed':
        channel = root
        items = root.findall(f'{{{ATOM_NAMESPACE}}}entry')
    else:
        return None, None

    return _child_fields(channel), [_child_fields(item) for item in items]


def _pick(fields: Optional[Dict[str, Any]], key: str, fallback: Any) -> Any:
    """Use the raw XML value when the element was present, otherwise the fallback."""
    if fields is not None and key in fields:
        return fields[key]
    return fallback


class FeedParser:
    """
    Parses RSS 2.0 and Atom documents into ParsedFeed objects.
    """

    def parse(self, raw: bytes) -> ParsedFeed:
        """
        Parse a feed document.

        Parameters:
        raw: Feed document bytes as fetched

        Returns:
        ParsedFeed with podcast metadata and the entries in feed order

        Raises:
        ParseError: If the document is not a recognizable feed, or is an <rss>
            document that is not well-formed XML
        """
        try:
            parsed = feedparser.parse(raw)
        except Exception as e:
            logger.debug(traceback.format_exc())
            raise ParseError(f"Feed parser failed: {e}") from e

        feed_format = parsed.get('version')
        if not feed_format:
            reason = parsed.get('bozo_exception') or 'no RSS or Atom root element'
            raise ParseError(f"Unsupported or malformed feed: {reason}")

        if parsed.get('bozo'):
            logger.warning(f"Feed parsed with recoverable errors ({feed_format}): {parsed.get('bozo_exception')}")

        # <rss>-rooted dialects; RSS 0.90 and 1.0 are RDF documents without iTunes folding
        is_rss = feed_format.startswith('rss') and feed_format not in RDF_FORMATS

        channel_fields, item_fields = read_raw_fields(raw)
        entries = parsed.get('entries', [])
        if is_rss:
            if channel_fields is None:
                reason = parsed.get('bozo_exception') or 'document is not readable XML'
                raise ParseError(f"Malformed {feed_format} feed: {reason}")
            if len(item_fields) != len(entries):
                raise ParseError(
                    f"Malformed {feed_format} feed: {len(item_fields)} <item> elements "
                    f"but feedparser found {len(entries)} entries"
                )
        elif item_fields is not None and len(item_fields) != len(entries):
            logger.warning(
                f"ElementTree found {len(item_fields)} entries but feedparser found {len(entries)}; "
                f"using feedparser values for entries"
            )
            item_fields = None

        metadata = self._podcast_metadata(parsed.get('feed', {}), channel_fields, is_rss)
        parsed_entries = [
            self._entry(entry, item_fields[index] if item_fields is not None else None, is_rss)
            for index, entry in enumerate(entries)
        ]

        logger.debug(f"Parsed {feed_format} feed '{metadata.get('title')}' with {len(parsed_entries)} entries")
        return ParsedFeed(podcast_metadata=metadata, entries=parsed_entries, format=feed_format)

    def _podcast_metadata(self, feed: Dict[str, Any], fields: Optional[Dict[str, Any]], is_rss: bool) -> Dict[str, Any]:
        publisher = feed.get('publisher_detail') or {}
        image = feed.get('image') or {}

        # feedparser reports the Atom subtitle and the RDF channel description as 'subtitle'
        description = _pick(fields, 'description', feed.get('subtitle')) if is_rss else feed.get('subtitle')

        return {
            'title': feed.get('title'),
            'description': description,
            'language': feed.get('language'),
            'website': feed.get('link'),
            'itunes_owner_name': _pick(fields, 'itunes_owner_name', publisher.get('name')),
            'itunes_owner_email': _pick(fields, 'itunes_owner_email', publisher.get('email')),
            'itunes_explicit': _pick(fields, 'itunes_explicit', feed.get('itunes_explicit')),
            'itunes_subtitle': _pick(fields, 'itunes_subtitle', None),
            'itunes_summary': _pick(fields, 'itunes_summary', None),
            'itunes_author': _pick(fields, 'itunes_author', feed.get('author')),
            'itunes_image': _pick(fields, 'itunes_image', image.get('href')),
        }

    def _entry(self, entry: Dict[str, Any], fields: Optional[Dict[str, Any]], is_rss: bool) -> ParsedEntry:
        enclosures = entry.get('enclosures') or [{}]
        enclosure = enclosures[0]

        exposed = set()
        itunes_summary = None
        if fields is not None and 'itunes_summary' in fields:
            exposed.add('itunes_summary')
            itunes_summary = fields['itunes_summary']

        if is_rss and fields is not None:
            # feedparser may have moved a second <description>/<itunes:summary> into 'content'
            content = fields.get('content')
            if 'content' in fields:
                exposed.add('content')
            summary = fields.get('description')
            if 'description' in fields:
                exposed.add('summary')
        else:
            content = None
            if entry.get('content'):
                exposed.add('content')
                content = entry['content'][0].get('value')
            summary = entry.get('summary')
            if 'summary' in entry:
                exposed.add('summary')

        published = entry.get('published')
        published_parsed = entry.get('published_parsed')
        if not published and not published_parsed:
            published = entry.get('updated')
            published_parsed = entry.get('updated_parsed')

        return ParsedEntry(
            title=entry.get('title'),
            link=entry.get('link'),
            guid=entry.get('id'),
            published=published,
            published_parsed=published_parsed,
            enclosure_url=enclosure.get('href'),
            enclosure_length=enclosure.get('length'),
            enclosure_type=enclosure.get('type'),
            itunes_explicit=_pick(fields, 'itunes_explicit', entry.get('itunes_explicit')),
            itunes_duration=_pick(fields, 'itunes_duration', entry.get('itunes_duration')),
            itunes_summary=itunes_summary,
            content=content,
            summary=summary,
            exposed_fields=frozenset(exposed),
        )
