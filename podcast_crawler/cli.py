"""
Command Line Interface for the podcast crawler.
"""

import argparse
import sys
import os
import traceback
from pathlib import Path

import pandas as pd
from tqdm import tqdm

from podcast_crawler import config
from podcast_crawler import (
    CrawlerError,
    FeedFetcher,
    SQLiteRecordStore,
    is_valid_database,
    read_feeds_file,
    validate_feed_url,
    crawl_podcast,
    summarise_crawl,
    crawl_totals,
)
from podcast_crawler.crawler import PODCAST_INFO, EPISODES_INFO
from podcast_crawler.logging_config import configure_logging


def _open_store(db_path, create=False):
    """
    Return a record store for db_path, or None after printing why it is unusable.

    With create=True a missing database is created; otherwise it must exist.
    """
    if os.path.exists(db_path):
        if not is_valid_database(db_path):
            print(f"❌ Database {db_path} is corrupted. Please recreate it.")
            return None
    elif not create:
        print(f"❌ Database not found: {db_path}")
        print("   Create it first using: podcast-crawler init")
        return None

    store = SQLiteRecordStore(db_path)
    store.initialize()
    return store


def init_database(db_path):
    """Create the database schema."""
    store = _open_store(db_path, create=True)
    if store is None:
        return False
    print(f"✅ Database ready: {db_path}")
    return True


def add_podcast(db_path, rss, title=None):
    """Register a single podcast feed."""
    store = _open_store(db_path, create=True)
    if store is None:
        return False

    if store.find_podcast_by_rss(rss):
        print(f"ℹ️  Feed already registered: {rss}")
        return True

    try:
        podcast = store.add_podcast(rss, title=title)
    except CrawlerError as e:
        print(f"❌ Could not add feed: {e}")
        return False

    print(f"✨ Added podcast {podcast.id}: {podcast.rss}")
    print(f"   Crawl it using: podcast-crawler crawl {podcast.id}")
    return True


def import_feeds(db_path, feeds_file=None):
    """Register every feed URL listed in a feeds file."""
    feeds_file = feeds_file or config.FEEDS_FILE
    feeds_path = Path(feeds_file)

    if not feeds_path.exists():
        print(f"❌ Error: {feeds_file} not found!")
        print(f"   Please create {feeds_file} and add your podcast feed URLs.")
        return False

    with open(feeds_path, 'r', encoding='utf-8') as f:
        feeds = read_feeds_file(f)

    if not feeds:
        print(f"⚠️  No feeds found in {feeds_file}")
        print("   Add feed URLs (one per line) to import them.")
        return False

    store = _open_store(db_path, create=True)
    if store is None:
        return False

    print(f"📋 Found {len(feeds)} feed(s) in {feeds_file}\n")

    added = existing = invalid = 0
    for feed_url in feeds:
        is_valid, error = validate_feed_url(feed_url)
        if not is_valid:
            print(f"⚠️  Skipping invalid feed '{feed_url}': {error}")
            invalid += 1
            continue
        if store.find_podcast_by_rss(feed_url):
            existing += 1
            continue
        podcast = store.add_podcast(feed_url)
        print(f"✨ Added podcast {podcast.id}: {feed_url}")
        added += 1

    print(f"\n✅ Import complete: {added} added, {existing} already registered, {invalid} invalid")
    return invalid == 0


def list_podcasts(db_path):
    """List all registered podcasts with their episode counts."""
    store = _open_store(db_path)
    if store is None:
        return False

    podcasts = store.list_podcasts()
    if not podcasts:
        print("📭 No podcasts found in database.")
        print("   Add feeds first using: podcast-crawler add <rss-url>")
        return False

    counts = store.episode_counts()
    print(f"📻 Found {len(podcasts)} podcast(s):\n")
    for podcast in podcasts:
        print(f"{podcast.id}. {podcast.title or '(not crawled yet)'}")
        print(f"   Feed: {podcast.rss}")
        print(f"   Episodes: {counts.get(podcast.id, 0)}")
        print()
    return True


def crawl(db_path, podcast_ids=None, operations=(PODCAST_INFO, EPISODES_INFO),
          skip_invalid_entries=None, dedupe_by_guid=None):
    """
    Crawl the given podcasts (all registered podcasts if none are given).

    Returns:
    True only if every requested operation succeeded
    """
    store = _open_store(db_path)
    if store is None:
        return False

    if podcast_ids:
        podcasts = []
        missing = []
        for podcast_id in podcast_ids:
            podcast = store.get_podcast(podcast_id)
            if podcast is None:
                missing.append(podcast_id)
            else:
                podcasts.append(podcast)
        for podcast_id in missing:
            print(f"❌ Podcast {podcast_id} not found in database.")
    else:
        missing = []
        podcasts = store.list_podcasts()

    if not podcasts:
        print("📭 No podcasts to crawl.")
        return False

    results = []
    with FeedFetcher() as fetcher:
        for podcast in tqdm(podcasts, desc="Crawling", unit="podcast"):
            results.extend(crawl_podcast(
                podcast,
                operations=operations,
                store=store,
                fetcher=fetcher,
                skip_invalid_entries=skip_invalid_entries,
                dedupe_by_guid=dedupe_by_guid,
            ))

    summary = summarise_crawl(results)
    totals = crawl_totals(summary)

    print("\n📊 Crawl summary:")
    with pd.option_context('display.max_rows', None, 'display.width', 120):
        print(summary.drop(columns=['podcast_id']).to_string(index=False))
    print(f"\n   Podcasts: {totals['podcasts']} ({totals['podcasts_failed']} with failures)")
    print(f"   Episodes: {totals['episodes_created']} created, "
          f"{totals['episodes_skipped']} skipped, {totals['episodes_failed']} failed")

    if totals['failed'] or missing:
        print(f"⚠️  {totals['failed']} operation(s) failed.")
        return False

    print("✅ Crawl complete!")
    return True


def _format_duration(seconds):
    if seconds is None:
        return ''
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def list_episodes(db_path, podcast_id, limit=None):
    """Tabulate the stored episodes of a podcast, newest first."""
    store = _open_store(db_path)
    if store is None:
        return False

    podcast = store.get_podcast(podcast_id)
    if podcast is None:
        print(f"❌ Podcast {podcast_id} not found in database.")
        print("   Use 'podcast-crawler list' to see available podcasts.")
        return False

    limit = limit if limit is not None else config.DEFAULT_EPISODE_LIST_LIMIT
    episodes = store.list_episodes(podcast_id, limit=limit)
    if not episodes:
        print(f"📭 No episodes stored for '{podcast.title or podcast.rss}'.")
        print(f"   Crawl it using: podcast-crawler crawl {podcast_id}")
        return False

    df = pd.DataFrame([
        {
            'id': episode.id,
            'published': episode.publication_date.strftime('%Y-%m-%d') if episode.publication_date else '',
            'duration': _format_duration(episode.itunes_duration),
            'explicit': '' if episode.itunes_explicit is None else ('yes' if episode.itunes_explicit else 'no'),
            'title': episode.title,
        }
        for episode in episodes
    ])

    total = store.count_episodes(podcast_id)
    print(f"📻 {podcast.title or podcast.rss}: showing {len(episodes)} of {total} episode(s)\n")
    print(df.to_string(index=False))
    return True


def show_episode(db_path, episode_id):
    """Show one episode together with its podcast."""
    store = _open_store(db_path)
    if store is None:
        return False

    episode = store.get_episode(episode_id)
    if episode is None:
        print(f"❌ Episode {episode_id} not found in database.")
        return False
    podcast = store.get_podcast(episode.podcast_id)

    print(f"🎧 {episode.title}")
    print(f"   Podcast: {podcast.title or podcast.rss}")
    if episode.publication_date:
        print(f"   Published: {episode.publication_date.isoformat()}")
    if episode.itunes_duration is not None:
        print(f"   Duration: {_format_duration(episode.itunes_duration)}")
    if episode.itunes_explicit is not None:
        print(f"   Explicit: {'yes' if episode.itunes_explicit else 'no'}")
    print(f"   GUID: {episode.guid}")
    if episode.link_to_website:
        print(f"   Link: {episode.link_to_website}")
    if episode.enclosure_url:
        print(f"   Audio: {episode.enclosure_url} ({episode.enclosure_type or 'unknown type'})")
    if episode.description:
        print()
        print(episode.description)
    return True


def build_parser():
    parser = argparse.ArgumentParser(
        prog='podcast-crawler',
        description='podcast-crawler - Crawl podcast feeds into a searchable database',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  podcast-crawler init                          # Create the database
  podcast-crawler add <rss-url>                 # Register a feed
  podcast-crawler import-feeds                  # Register every feed in feeds.txt
  podcast-crawler list                          # List registered podcasts
  podcast-crawler crawl                         # Crawl every registered podcast
  podcast-crawler crawl 3 --episodes-only       # Only ingest episodes of podcast 3
  podcast-crawler episodes 3                    # Show stored episodes of podcast 3
  podcast-crawler show-episode 42               # Show one episode
        """
    )
    parser.add_argument('--db', default=None, help=f'Database path (default: {config.DB_PATH})')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help=f'Logging level (default: {config.LOG_LEVEL})')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('init', help='Create the database schema')

    add_parser = subparsers.add_parser('add', help='Register a podcast feed')
    add_parser.add_argument('rss', help='RSS/Atom feed URL')
    add_parser.add_argument('--title', default=None, help='Title to show until the first crawl')

    import_parser = subparsers.add_parser('import-feeds', help='Register every feed listed in a file')
    import_parser.add_argument('--file', default=config.FEEDS_FILE,
                               help=f'Feeds file path (default: {config.FEEDS_FILE})')

    subparsers.add_parser('list', help='List registered podcasts')

    crawl_parser = subparsers.add_parser('crawl', help='Fetch feeds and update podcasts and episodes')
    crawl_parser.add_argument('podcast_ids', nargs='*', type=int, metavar='ID',
                              help='Podcast ids (optional, crawls all if omitted)')
    scope = crawl_parser.add_mutually_exclusive_group()
    scope.add_argument('--info-only', action='store_true', help='Only update podcast metadata')
    scope.add_argument('--episodes-only', action='store_true', help='Only ingest episodes')
    crawl_parser.add_argument('--skip-invalid-entries', action='store_true', default=None,
                              help='Skip entries that fail to ingest instead of aborting the feed')
    crawl_parser.add_argument('--dedupe-by-guid', action='store_true', default=None,
                              help='Skip entries whose guid is already stored')

    episodes_parser = subparsers.add_parser('episodes', help='List stored episodes of a podcast')
    episodes_parser.add_argument('podcast_id', type=int, help='Podcast id')
    episodes_parser.add_argument('--limit', type=int, default=None,
                                 help=f'Number of episodes to show (default: {config.DEFAULT_EPISODE_LIST_LIMIT})')

    show_parser = subparsers.add_parser('show-episode', help='Show one episode')
    show_parser.add_argument('episode_id', type=int, help='Episode id')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.log_level:
        config.LOG_LEVEL = args.log_level
        configure_logging(force=True)

    db_path = args.db or config.DB_PATH

    try:
        if args.command == 'init':
            success = init_database(db_path)
        elif args.command == 'add':
            success = add_podcast(db_path, args.rss, title=args.title)
        elif args.command == 'import-feeds':
            success = import_feeds(db_path, args.file)
        elif args.command == 'list':
            success = list_podcasts(db_path)
        elif args.command == 'crawl':
            if args.info_only:
                operations = (PODCAST_INFO,)
            elif args.episodes_only:
                operations = (EPISODES_INFO,)
            else:
                operations = (PODCAST_INFO, EPISODES_INFO)
            success = crawl(
                db_path,
                podcast_ids=args.podcast_ids,
                operations=operations,
                skip_invalid_entries=args.skip_invalid_entries,
                dedupe_by_guid=args.dedupe_by_guid,
            )
        elif args.command == 'episodes':
            success = list_episodes(db_path, args.podcast_id, limit=args.limit)
        elif args.command == 'show-episode':
            success = show_episode(db_path, args.episode_id)
        else:
            parser.print_help()
            return 1

        return 0 if success else 1

    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user.")
        return 130
    except Exception as e:
        print(f"❌ Unexpected error: {e}")
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
