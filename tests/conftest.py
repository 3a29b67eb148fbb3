"""Shared fixtures and test utilities for podcast_crawler tests.

This module contains:
- Test constants and feed documents
- Helper functions for building HTTP responses and fetchers
- A RecordingStore fake that keeps every write in memory
- Fixtures for temporary SQLite stores
"""

import unittest.mock

import pytest
import requests

from podcast_crawler.crawler import FeedFetcher
from podcast_crawler.database import RecordStore, SQLiteRecordStore
from podcast_crawler.models import Episode, Podcast

# Test constants
TEST_FEED_URL = "https://feeds.example.com/the-daily.rss"
TEST_ATOM_URL = "https://atom.example.com/feed.atom"
TEST_PODCAST_TITLE = "The Joe Rogan Experience"
TEST_PODCAST_ID = 7

DAILY_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>The Daily</title>
    <link>https://www.example.com/the-daily</link>
    <language>en</language>
    <description>This is what the news should sound like.</description>
    <itunes:author>The Example Times</itunes:author>
    <itunes:subtitle>Twenty minutes a day, five days a week.</itunes:subtitle>
    <itunes:summary>The biggest stories of our time, told by the best journalists.</itunes:summary>
    <itunes:owner>
      <itunes:name>The Example Times</itunes:name>
      <itunes:email>thedaily@example.com</itunes:email>
    </itunes:owner>
    <itunes:explicit>no</itunes:explicit>
    <itunes:image href="https://images.example.com/the-daily.jpg"/>
    <item>
      <title>The Long Interview</title>
      <link>https://www.example.com/the-daily/long-interview</link>
      <guid isPermaLink="false">daily-0001</guid>
      <pubDate>Mon, 01 Jan 2024 10:00:00 +0000</pubDate>
      <enclosure url="https://media.example.com/daily-0001.mp3" length="98113280" type="audio/mpeg"/>
      <itunes:duration>01:42:13</itunes:duration>
      <itunes:explicit>yes</itunes:explicit>
      <itunes:summary>An itunes summary of the long interview.</itunes:summary>
      <description>A plain description of the long interview.</description>
    </item>
    <item>
      <title>Show Notes Episode</title>
      <link>https://www.example.com/the-daily/show-notes</link>
      <guid isPermaLink="false">daily-0002</guid>
      <pubDate>Tue, 02 Jan 2024 10:00:00 +0000</pubDate>
      <enclosure url="https://media.example.com/daily-0002.mp3" length="27410000" type="audio/mpeg"/>
      <itunes:duration>28:33</itunes:duration>
      <itunes:explicit>clean</itunes:explicit>
      <content:encoded><![CDATA[<p>Full show notes.</p>]]></content:encoded>
      <description>Short description of the show notes episode.</description>
    </item>
    <item>
      <title>Plain Episode</title>
      <link>https://www.example.com/the-daily/plain</link>
      <guid isPermaLink="false">daily-0003</guid>
      <pubDate>Wed, 03 Jan 2024 10:00:00 +0000</pubDate>
      <enclosure url="https://media.example.com/daily-0003.mp3" length="16820000" type="audio/mpeg"/>
      <itunes:duration>1752</itunes:duration>
      <description>Only a plain description.</description>
    </item>
  </channel>
</rss>
"""

DAILY_ENTRY_COUNT = 3

EXPLICIT_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>After Dark</title>
    <link>https://www.example.com/after-dark</link>
    <description>Late night talk.</description>
    <itunes:explicit>true</itunes:explicit>
    <item>
      <title>Episode One</title>
      <guid isPermaLink="false">after-dark-1</guid>
      <pubDate>Fri, 05 Jan 2024 23:00:00 +0000</pubDate>
      <enclosure url="https://media.example.com/after-dark-1.mp3" length="100" type="audio/mpeg"/>
      <itunes:explicit>yes</itunes:explicit>
    </item>
  </channel>
</rss>
"""

SHORT_DURATION_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>Short Cast</title>
    <link>https://www.example.com/short-cast</link>
    <description>Half an hour, give or take.</description>
    <item>
      <title>Half Hour</title>
      <guid isPermaLink="false">short-1</guid>
      <pubDate>Sat, 06 Jan 2024 08:00:00 +0000</pubDate>
      <enclosure url="https://media.example.com/short-1.mp3" length="200" type="audio/mpeg"/>
      <itunes:duration>28:33</itunes:duration>
      <description>Twenty-eight minutes.</description>
    </item>
  </channel>
</rss>
"""

BAD_DURATION_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>Broken Durations</title>
    <link>https://www.example.com/broken</link>
    <description>The second episode has a duration nobody can read.</description>
    <item>
      <title>Fine</title>
      <guid isPermaLink="false">broken-1</guid>
      <itunes:duration>10:00</itunes:duration>
    </item>
    <item>
      <title>Too Many Segments</title>
      <guid isPermaLink="false">broken-2</guid>
      <itunes:duration>1:02:03:04</itunes:duration>
    </item>
    <item>
      <title>Also Fine</title>
      <guid isPermaLink="false">broken-3</guid>
      <itunes:duration>05:00</itunes:duration>
    </item>
  </channel>
</rss>
"""

EMPTY_SUMMARY_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Empty Summaries</title>
    <link>https://www.example.com/empty</link>
    <description>Episodes with an empty itunes:summary element.</description>
    <item>
      <title>Empty Summary</title>
      <guid isPermaLink="false">empty-1</guid>
      <itunes:summary></itunes:summary>
      <content:encoded><![CDATA[<p>Notes nobody will see.</p>]]></content:encoded>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Cast</title>
  <subtitle>A podcast published as Atom.</subtitle>
  <link href="https://atom.example.com/"/>
  <id>urn:uuid:60a76c80-d399-11d9-b93c-0003939e0af6</id>
  <updated>2024-02-01T00:00:00Z</updated>
  <author><name>Atom Author</name></author>
  <entry>
    <title>Atom Episode</title>
    <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
    <link href="https://atom.example.com/episodes/1"/>
    <link rel="enclosure" href="https://atom.example.com/episodes/1.mp3" length="4096" type="audio/mpeg"/>
    <updated>2024-02-01T00:00:00Z</updated>
    <summary>The first Atom episode.</summary>
  </entry>
</feed>
"""

# feedparser accepts the HTML entity; an XML parser does not
ENTITY_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>Entity&nbsp;Cast</title>
    <link>https://www.example.com/entity-cast</link>
    <description>A channel description.</description>
    <itunes:subtitle>A channel subtitle.</itunes:subtitle>
    <itunes:summary>A channel summary.</itunes:summary>
    <itunes:explicit>true</itunes:explicit>
    <item>
      <title>Entity Episode</title>
      <guid isPermaLink="false">entity-1</guid>
      <pubDate>Mon, 08 Jan 2024 10:00:00 +0000</pubDate>
      <enclosure url="https://media.example.com/entity-1.mp3" length="100" type="audio/mpeg"/>
      <itunes:duration>10:00</itunes:duration>
      <itunes:summary>An itunes summary.</itunes:summary>
      <description>A plain description.</description>
    </item>
  </channel>
</rss>
"""

RDF_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/">
  <channel rdf:about="https://rdf.example.com/">
    <title>RDF Cast</title>
    <link>https://rdf.example.com/</link>
    <description>A podcast published as RSS 1.0.</description>
    <items>
      <rdf:Seq>
        <rdf:li rdf:resource="https://rdf.example.com/episodes/1"/>
      </rdf:Seq>
    </items>
  </channel>
  <item rdf:about="https://rdf.example.com/episodes/1">
    <title>RDF Episode</title>
    <link>https://rdf.example.com/episodes/1</link>
    <description>The first RDF episode.</description>
  </item>
</rdf:RDF>
"""

HTML_PAGE = b"""<!DOCTYPE html>
<html><head><title>Not a feed</title></head><body><p>Hello</p></body></html>
"""


# Test helper functions
def make_response(body=b"", status_code=200, url=TEST_FEED_URL):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response._content = body
    response.url = url
    return response


def make_session(body=b"", status_code=200, side_effect=None):
    """Build a requests.Session whose get() is a Mock."""
    session = requests.Session()
    if side_effect is not None:
        session.get = unittest.mock.Mock(side_effect=side_effect)
    else:
        session.get = unittest.mock.Mock(return_value=make_response(body, status_code))
    return session


def make_fetcher(body=b"", status_code=200, side_effect=None):
    """Build a FeedFetcher over a mocked session."""
    return FeedFetcher(session=make_session(body, status_code, side_effect), timeout=5)


def make_podcast(**overrides):
    """Create a saved Podcast entity with test defaults."""
    defaults = {
        "rss": TEST_FEED_URL,
        "id": TEST_PODCAST_ID,
        "title": TEST_PODCAST_TITLE,
    }
    defaults.update(overrides)
    return Podcast(**defaults)


class RecordingStore(RecordStore):
    """In-memory record store that records every write it receives.

    Args:
        fail_with: Exception raised by every write, if given
        existing_guids: Guids reported as already stored
    """

    def __init__(self, fail_with=None, existing_guids=()):
        self.fail_with = fail_with
        self.existing_guids = set(existing_guids)
        self.updates = []
        self.episodes = []

    def update_podcast(self, podcast, attributes):
        if self.fail_with is not None:
            raise self.fail_with
        self.updates.append(dict(attributes))
        for name, value in attributes.items():
            setattr(podcast, name, value)
        return podcast

    def create_episode(self, podcast, attributes):
        if self.fail_with is not None:
            raise self.fail_with
        episode = Episode(id=len(self.episodes) + 1, podcast_id=podcast.id, **attributes)
        self.episodes.append(episode)
        return episode

    def episode_exists(self, podcast, guid):
        return guid in self.existing_guids


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "podcast_search.db")


@pytest.fixture
def sqlite_store(db_path):
    store = SQLiteRecordStore(db_path)
    store.initialize()
    return store


@pytest.fixture
def stored_podcast(sqlite_store):
    return sqlite_store.add_podcast(TEST_FEED_URL, title=TEST_PODCAST_TITLE)
