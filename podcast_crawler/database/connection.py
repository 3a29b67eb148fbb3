"""
Database connection management.
"""

import sqlite3
import os
from contextlib import contextmanager
from typing import Generator
from podcast_crawler import config


def is_valid_database(db_path: str) -> bool:
    """
    Check if a file is a valid SQLite database.

    Parameters:
    db_path: Path to the database file

    Returns:
    True if valid database, False otherwise
    """
    if not os.path.exists(db_path):
        return False

    try:
        test_conn = sqlite3.connect(db_path)
        try:
            test_conn.execute("SELECT name FROM sqlite_master WHERE type='table' LIMIT 1")
        finally:
            test_conn.close()
        return True
    except sqlite3.Error:
        return False


@contextmanager
def get_db_connection(db_path: str = None) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.

    Foreign keys are enabled on every connection so that deleting a podcast
    cascades to its episodes.

    Parameters:
    db_path: Path to database file (defaults to config.DB_PATH)

    Yields:
    sqlite3.Connection object

    Example:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM podcasts")
    """
    if db_path is None:
        db_path = config.DB_PATH

    conn = sqlite3.connect(db_path, timeout=config.DB_TIMEOUT)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        yield conn
    finally:
        conn.close()
