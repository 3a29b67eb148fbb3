"""
Record store: the persistence collaborator of the crawler.

RecordStore is the interface the crawler writes through; SQLiteRecordStore
is the concrete implementation used by the CLI. Every operation opens its own
connection, so independent crawlers never share mutable state.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional
from podcast_crawler import config
from podcast_crawler.errors import PersistenceError, ValidationError
from podcast_crawler.models import Episode, Podcast, PODCAST_METADATA_FIELDS, EPISODE_FIELDS
from podcast_crawler.validation import validate_feed_url
from podcast_crawler.database.connection import get_db_connection
from podcast_crawler.database.queries import count_episodes, episode_counts, guid_exists
from podcast_crawler.database.schema import create_tables_if_not_exist
from podcast_crawler.database.transactions import transaction
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)

PODCASTS = config.PODCASTS_TABLE_NAME
EPISODES = config.EPISODES_TABLE_NAME


class RecordStore:
    """
    Operations the crawler needs from persistence.

    update_podcast writes the given metadata fields onto an existing podcast
    and mirrors them onto the passed entity. create_episode stores a new
    episode under the podcast. Implementations raise PersistenceError when a
    write is rejected.
    """

    def update_podcast(self, podcast: Podcast, attributes: Dict[str, Any]) -> Podcast:
        raise NotImplementedError

    def create_episode(self, podcast: Podcast, attributes: Dict[str, Any]) -> Episode:
        raise NotImplementedError

    def episode_exists(self, podcast: Podcast, guid: str) -> bool:
        raise NotImplementedError


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_db_bool(value: Optional[bool]) -> Optional[int]:
    return None if value is None else int(bool(value))


def _from_db_bool(value: Optional[int]) -> Optional[bool]:
    return None if value is None else bool(value)


def _check_fields(attributes: Dict[str, Any], allowed: tuple, entity: str) -> None:
    unknown = sorted(set(attributes) - set(allowed))
    if unknown:
        raise PersistenceError(f"Unknown {entity} field(s): {', '.join(unknown)}")


def podcast_from_row(row: sqlite3.Row) -> Podcast:
    values = {name: row[name] for name in PODCAST_METADATA_FIELDS}
    values['itunes_explicit'] = _from_db_bool(values['itunes_explicit'])
    return Podcast(rss=row['rss'], id=row['id'], **values)


def episode_from_row(row: sqlite3.Row) -> Episode:
    publication_date = row['publication_date']
    return Episode(
        id=row['id'],
        podcast_id=row['podcast_id'],
        guid=row['guid'],
        title=row['title'],
        description=row['description'],
        link_to_website=row['link_to_website'],
        publication_date=datetime.fromisoformat(publication_date) if publication_date else None,
        enclosure_url=row['enclosure_url'],
        enclosure_length=row['enclosure_length'],
        enclosure_type=row['enclosure_type'],
        itunes_explicit=_from_db_bool(row['itunes_explicit']),
        itunes_duration=row['itunes_duration'],
    )


class SQLiteRecordStore(RecordStore):
    """
    SQLite-backed record store.

    Parameters:
    db_path: Path to the database file (defaults to config.DB_PATH)
    """

    def __init__(self, db_path: str = None):
        self.db_path = db_path or config.DB_PATH

    def initialize(self) -> None:
        """Create the schema if it does not exist yet."""
        with self._connection() as conn:
            create_tables_if_not_exist(conn)

    # Podcasts

    def add_podcast(self, rss: str, title: str = None) -> Podcast:
        """
        Register a podcast by its feed URL.

        Raises:
        ValidationError: If the feed URL is invalid
        PersistenceError: If the feed is already registered or the insert fails
        """
        is_valid, error = validate_feed_url(rss)
        if not is_valid:
            raise ValidationError(f"Invalid RSS feed URL '{rss}': {error}")
        rss = rss.strip()

        with self._connection() as conn:
            try:
                with transaction(conn) as cursor:
                    now = _now()
                    cursor.execute(
                        f"INSERT INTO {PODCASTS} (rss, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
                        (rss, title, now, now)
                    )
                    podcast_id = cursor.lastrowid
            except PersistenceError as e:
                if isinstance(e.__cause__, sqlite3.IntegrityError):
                    raise PersistenceError(f"Podcast feed already registered: {rss}") from e.__cause__
                raise

        logger.info(f"Registered podcast {podcast_id}: {rss}")
        return Podcast(rss=rss, id=podcast_id, title=title)

    def get_podcast(self, podcast_id: int) -> Optional[Podcast]:
        row = self._fetch_one(f"SELECT * FROM {PODCASTS} WHERE id = ?", (podcast_id,))
        return podcast_from_row(row) if row else None

    def find_podcast_by_rss(self, rss: str) -> Optional[Podcast]:
        row = self._fetch_one(f"SELECT * FROM {PODCASTS} WHERE rss = ?", (rss.strip(),))
        return podcast_from_row(row) if row else None

    def list_podcasts(self) -> List[Podcast]:
        rows = self._fetch_all(f"SELECT * FROM {PODCASTS} ORDER BY id")
        return [podcast_from_row(row) for row in rows]

    def update_podcast(self, podcast: Podcast, attributes: Dict[str, Any]) -> Podcast:
        """
        Write metadata fields onto a stored podcast and mirror them on the entity.

        The rss field is not writable here; it is fixed at registration.
        """
        _check_fields(attributes, PODCAST_METADATA_FIELDS, 'podcast')
        if podcast.id is None:
            raise PersistenceError(f"Podcast '{podcast.title}' has not been saved")
        if not attributes:
            return podcast

        values = dict(attributes)
        if 'itunes_explicit' in values:
            values['itunes_explicit'] = _to_db_bool(values['itunes_explicit'])
        assignments = ', '.join(f"{name} = ?" for name in values)

        with self._connection() as conn:
            with transaction(conn) as cursor:
                cursor.execute(
                    f"UPDATE {PODCASTS} SET {assignments}, updated_at = ? WHERE id = ?",
                    (*values.values(), _now(), podcast.id)
                )
                if cursor.rowcount == 0:
                    raise PersistenceError(f"Podcast {podcast.id} does not exist")

        for name, value in attributes.items():
            setattr(podcast, name, value)
        logger.debug(f"Updated podcast {podcast.id} ({len(attributes)} fields)")
        return podcast

    def delete_podcast(self, podcast_id: int) -> bool:
        """Delete a podcast and, through the foreign key, all its episodes."""
        with self._connection() as conn:
            with transaction(conn) as cursor:
                cursor.execute(f"DELETE FROM {PODCASTS} WHERE id = ?", (podcast_id,))
                return cursor.rowcount > 0

    # Episodes

    def create_episode(self, podcast: Podcast, attributes: Dict[str, Any]) -> Episode:
        """
        Insert a new episode under a podcast.

        Raises:
        PersistenceError: If the podcast is unsaved, the guid is missing,
            an unknown field is passed or the insert fails
        """
        _check_fields(attributes, EPISODE_FIELDS, 'episode')
        if podcast.id is None:
            raise PersistenceError(f"Podcast '{podcast.title}' has not been saved")
        if not attributes.get('guid'):
            raise PersistenceError("Episode guid is required")

        values = {name: attributes.get(name) for name in EPISODE_FIELDS}
        publication_date = values['publication_date']
        if isinstance(publication_date, datetime):
            values['publication_date'] = publication_date.isoformat()
        values['itunes_explicit'] = _to_db_bool(values['itunes_explicit'])

        columns = ', '.join(('podcast_id', *EPISODE_FIELDS, 'created_at'))
        placeholders = ', '.join('?' * (len(EPISODE_FIELDS) + 2))
        with self._connection() as conn:
            with transaction(conn) as cursor:
                cursor.execute(
                    f"INSERT INTO {EPISODES} ({columns}) VALUES ({placeholders})",
                    (podcast.id, *values.values(), _now())
                )
                episode_id = cursor.lastrowid

        fields = {name: attributes.get(name) for name in EPISODE_FIELDS}
        return Episode(id=episode_id, podcast_id=podcast.id, **fields)

    def episode_exists(self, podcast: Podcast, guid: str) -> bool:
        if podcast.id is None:
            return False
        with self._connection() as conn:
            return guid_exists(conn, podcast.id, guid)

    def get_episode(self, episode_id: int) -> Optional[Episode]:
        row = self._fetch_one(f"SELECT * FROM {EPISODES} WHERE id = ?", (episode_id,))
        return episode_from_row(row) if row else None

    def list_episodes(self, podcast_id: int, limit: int = None) -> List[Episode]:
        """Episodes of a podcast, newest publication first."""
        query = (
            f"SELECT * FROM {EPISODES} WHERE podcast_id = ? "
            "ORDER BY publication_date IS NULL, publication_date DESC, id"
        )
        params = (podcast_id,)
        if limit is not None:
            query += " LIMIT ?"
            params += (limit,)
        return [episode_from_row(row) for row in self._fetch_all(query, params)]

    def count_episodes(self, podcast_id: int) -> int:
        with self._connection() as conn:
            return count_episodes(conn, podcast_id)

    def episode_counts(self) -> Dict[int, int]:
        with self._connection() as conn:
            return episode_counts(conn)

    # Helpers

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            with get_db_connection(self.db_path) as conn:
                yield conn
        except sqlite3.Error as e:
            raise PersistenceError(f"Database error ({self.db_path}): {e}") from e

    def _fetch_one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        with self._connection() as conn:
            return conn.execute(query, params).fetchone()

    def _fetch_all(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        with self._connection() as conn:
            return conn.execute(query, params).fetchall()
