"""
Database query utility functions.
"""

import sqlite3
from podcast_crawler import config


def table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    """
    Check if a table exists in the SQLite database.

    Parameters:
    conn: SQLite connection object
    table_name: Name of the table to check

    Returns:
    True if table exists, False otherwise
    """
    cursor = conn.execute("""
        SELECT name FROM sqlite_master
        WHERE type='table' AND name=?
    """, (table_name,))
    return cursor.fetchone() is not None


def count_episodes(conn: sqlite3.Connection, podcast_id: int) -> int:
    """
    Count the episodes stored for a podcast.

    Parameters:
    conn: SQLite connection object
    podcast_id: Id of the podcast

    Returns:
    Number of episode rows
    """
    cursor = conn.execute(
        f"SELECT COUNT(*) FROM {config.EPISODES_TABLE_NAME} WHERE podcast_id = ?",
        (podcast_id,)
    )
    return cursor.fetchone()[0]


def episode_counts(conn: sqlite3.Connection) -> dict:
    """
    Count episodes for every podcast in a single aggregate query.

    Returns:
    dict: {podcast_id: episode count}; podcasts without episodes are absent
    """
    cursor = conn.execute(f"""
        SELECT podcast_id, COUNT(*)
        FROM {config.EPISODES_TABLE_NAME}
        GROUP BY podcast_id
    """)
    return {podcast_id: count for podcast_id, count in cursor.fetchall()}


def guid_exists(conn: sqlite3.Connection, podcast_id: int, guid: str) -> bool:
    """
    Check whether a podcast already has an episode with the given guid.
    """
    cursor = conn.execute(
        f"SELECT 1 FROM {config.EPISODES_TABLE_NAME} WHERE podcast_id = ? AND guid = ? LIMIT 1",
        (podcast_id, guid)
    )
    return cursor.fetchone() is not None
