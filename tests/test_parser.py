"""Tests for feed parsing."""

from datetime import datetime, timezone

import pytest
from conftest import (
    ATOM_FEED,
    DAILY_ENTRY_COUNT,
    DAILY_RSS,
    EMPTY_SUMMARY_RSS,
    ENTITY_RSS,
    EXPLICIT_RSS,
    HTML_PAGE,
    RDF_FEED,
)

from podcast_crawler.crawler.fields import resolve_description, resolve_publication_date
from podcast_crawler.crawler import parser as parser_module
from podcast_crawler.crawler.parser import FeedParser, read_raw_fields
from podcast_crawler.errors import ParseError
from podcast_crawler.models import PODCAST_METADATA_FIELDS


@pytest.fixture
def parser():
    return FeedParser()


class TestRssMetadata:
    def test_all_metadata_fields_present(self, parser):
        feed = parser.parse(DAILY_RSS)
        assert set(feed.podcast_metadata) == set(PODCAST_METADATA_FIELDS)

    def test_channel_values(self, parser):
        metadata = parser.parse(DAILY_RSS).podcast_metadata
        assert metadata["title"] == "The Daily"
        assert metadata["description"] == "This is what the news should sound like."
        assert metadata["language"] == "en"
        assert metadata["website"] == "https://www.example.com/the-daily"
        assert metadata["itunes_owner_name"] == "The Example Times"
        assert metadata["itunes_owner_email"] == "thedaily@example.com"
        assert metadata["itunes_subtitle"] == "Twenty minutes a day, five days a week."
        assert metadata["itunes_summary"] == "The biggest stories of our time, told by the best journalists."
        assert metadata["itunes_author"] == "The Example Times"
        assert metadata["itunes_image"] == "https://images.example.com/the-daily.jpg"

    def test_explicit_is_left_raw(self, parser):
        assert parser.parse(DAILY_RSS).podcast_metadata["itunes_explicit"] == "no"
        assert parser.parse(EXPLICIT_RSS).podcast_metadata["itunes_explicit"] == "true"

    def test_undeclared_fields_are_none(self, parser):
        metadata = parser.parse(EXPLICIT_RSS).podcast_metadata
        assert metadata["itunes_subtitle"] is None
        assert metadata["itunes_summary"] is None
        assert metadata["itunes_owner_email"] is None

    def test_format(self, parser):
        assert parser.parse(DAILY_RSS).format.startswith("rss")


class TestRssEntries:
    def test_entries_in_feed_order(self, parser):
        entries = parser.parse(DAILY_RSS).entries
        assert len(entries) == DAILY_ENTRY_COUNT
        assert [entry.guid for entry in entries] == ["daily-0001", "daily-0002", "daily-0003"]

    def test_entry_fields(self, parser):
        entry = parser.parse(DAILY_RSS).entries[0]
        assert entry.title == "The Long Interview"
        assert entry.link == "https://www.example.com/the-daily/long-interview"
        assert entry.enclosure_url == "https://media.example.com/daily-0001.mp3"
        assert entry.enclosure_length == "98113280"
        assert entry.enclosure_type == "audio/mpeg"
        assert entry.itunes_duration == "01:42:13"
        assert entry.itunes_explicit == "yes"

    def test_publication_date(self, parser):
        entry = parser.parse(DAILY_RSS).entries[0]
        published = resolve_publication_date(entry.published_parsed, entry.published)
        assert published == datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)

    def test_itunes_summary_and_description_stay_apart(self, parser):
        entry = parser.parse(DAILY_RSS).entries[0]
        assert entry.itunes_summary == "An itunes summary of the long interview."
        assert entry.summary == "A plain description of the long interview."
        assert entry.exposes("itunes_summary")
        assert not entry.exposes("content")

    def test_description_resolution_per_entry(self, parser):
        entries = parser.parse(DAILY_RSS).entries
        assert [resolve_description(entry) for entry in entries] == [
            "An itunes summary of the long interview.",
            "<p>Full show notes.</p>",
            "Only a plain description.",
        ]

    def test_empty_itunes_summary_is_exposed(self, parser):
        entry = parser.parse(EMPTY_SUMMARY_RSS).entries[0]
        assert entry.exposes("itunes_summary")
        assert entry.exposes("content")
        assert resolve_description(entry) is None


class TestAtom:
    def test_metadata(self, parser):
        feed = parser.parse(ATOM_FEED)
        metadata = feed.podcast_metadata
        assert feed.format.startswith("atom")
        assert metadata["title"] == "Atom Cast"
        assert metadata["description"] == "A podcast published as Atom."
        assert metadata["website"] == "https://atom.example.com/"
        assert metadata["itunes_author"] == "Atom Author"
        assert metadata["itunes_explicit"] is None

    def test_entry(self, parser):
        entries = parser.parse(ATOM_FEED).entries
        assert len(entries) == 1
        entry = entries[0]
        assert entry.guid == "urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a"
        assert entry.link == "https://atom.example.com/episodes/1"
        assert entry.enclosure_url == "https://atom.example.com/episodes/1.mp3"
        assert entry.enclosure_length == "4096"
        assert resolve_description(entry) == "The first Atom episode."

    def test_updated_used_when_published_missing(self, parser):
        entry = parser.parse(ATOM_FEED).entries[0]
        published = resolve_publication_date(entry.published_parsed, entry.published)
        assert published == datetime(2024, 2, 1, tzinfo=timezone.utc)


class TestRdf:
    def test_format(self, parser):
        assert parser.parse(RDF_FEED).format == "rss10"

    def test_channel_description(self, parser):
        metadata = parser.parse(RDF_FEED).podcast_metadata
        assert metadata["title"] == "RDF Cast"
        assert metadata["description"] == "A podcast published as RSS 1.0."
        assert metadata["itunes_summary"] is None

    def test_entry_description(self, parser):
        entries = parser.parse(RDF_FEED).entries
        assert len(entries) == 1
        assert entries[0].link == "https://rdf.example.com/episodes/1"
        assert resolve_description(entries[0]) == "The first RDF episode."


class TestUnparseable:
    def test_html_page_raises(self, parser):
        with pytest.raises(ParseError):
            parser.parse(HTML_PAGE)

    def test_empty_document_raises(self, parser):
        with pytest.raises(ParseError):
            parser.parse(b"")

    def test_rss_with_html_entity_raises(self, parser):
        with pytest.raises(ParseError, match="Malformed rss"):
            parser.parse(ENTITY_RSS)

    def test_rss_item_count_mismatch_raises(self, parser, monkeypatch):
        channel, items = read_raw_fields(DAILY_RSS)
        monkeypatch.setattr(parser_module, "read_raw_fields", lambda raw: (channel, items[:-1]))
        with pytest.raises(ParseError, match="2 <item> elements but feedparser found 3 entries"):
            parser.parse(DAILY_RSS)


class TestReadRawFields:
    def test_rss_channel_and_items(self):
        channel, items = read_raw_fields(DAILY_RSS)
        assert channel["itunes_owner_name"] == "The Example Times"
        assert channel["itunes_image"] == "https://images.example.com/the-daily.jpg"
        assert len(items) == DAILY_ENTRY_COUNT
        assert items[1]["content"] == "<p>Full show notes.</p>"
        assert "itunes_summary" not in items[1]

    def test_malformed_xml(self):
        assert read_raw_fields(b"<rss><channel>") == (None, None)

    def test_unknown_root(self):
        assert read_raw_fields(HTML_PAGE.replace(b"<!DOCTYPE html>\n", b"")) == (None, None)
