"""
Database schema creation and indexes.
"""

import sqlite3
from podcast_crawler import config
from podcast_crawler.database.queries import table_exists
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)


PODCASTS_DDL = f"""
    CREATE TABLE IF NOT EXISTS {config.PODCASTS_TABLE_NAME} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        rss TEXT NOT NULL UNIQUE,
        title TEXT,
        description TEXT,
        language TEXT,
        website TEXT,
        itunes_owner_name TEXT,
        itunes_owner_email TEXT,
        itunes_explicit INTEGER,
        itunes_subtitle TEXT,
        itunes_summary TEXT,
        itunes_author TEXT,
        itunes_image TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
"""

EPISODES_DDL = f"""
    CREATE TABLE IF NOT EXISTS {config.EPISODES_TABLE_NAME} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        podcast_id INTEGER NOT NULL
            REFERENCES {config.PODCASTS_TABLE_NAME}(id) ON DELETE CASCADE,
        title TEXT,
        description TEXT,
        link_to_website TEXT,
        guid TEXT NOT NULL,
        publication_date TEXT,
        enclosure_url TEXT,
        enclosure_length TEXT,
        enclosure_type TEXT,
        itunes_explicit INTEGER,
        itunes_duration INTEGER CHECK (itunes_duration IS NULL OR itunes_duration >= 0),
        created_at TEXT NOT NULL
    )
"""

# guid is indexed but not unique: re-crawls append unless the
# ingester is asked to dedupe.
INDEXES = (
    f"CREATE INDEX IF NOT EXISTS idx_episodes_podcast_id ON {config.EPISODES_TABLE_NAME}(podcast_id)",
    f"CREATE INDEX IF NOT EXISTS idx_episodes_podcast_guid ON {config.EPISODES_TABLE_NAME}(podcast_id, guid)",
    f"CREATE INDEX IF NOT EXISTS idx_episodes_publication_date ON {config.EPISODES_TABLE_NAME}(publication_date)",
)


def create_tables_if_not_exist(conn: sqlite3.Connection) -> None:
    """
    Create the podcasts and episodes tables and their indexes.

    Safe to call repeatedly.

    Parameters:
    conn: SQLite connection object
    """
    created = not table_exists(conn, config.PODCASTS_TABLE_NAME)

    cursor = conn.cursor()
    cursor.execute(PODCASTS_DDL)
    cursor.execute(EPISODES_DDL)
    for statement in INDEXES:
        cursor.execute(statement)
    conn.commit()

    if created:
        logger.info("Created podcasts and episodes tables")
    else:
        logger.debug("Schema already present")


def explain_query_plan(conn: sqlite3.Connection, query: str, params: tuple = ()) -> list:
    """
    Return SQLite's query plan for a query, one detail string per step.

    Useful for checking that the episode indexes are picked up.
    """
    cursor = conn.execute(f"EXPLAIN QUERY PLAN {query}", params)
    return [row[-1] for row in cursor.fetchall()]
