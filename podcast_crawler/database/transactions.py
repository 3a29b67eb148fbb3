"""
Transaction management for the record store.
"""

import sqlite3
from contextlib import contextmanager
from typing import Iterator
from podcast_crawler.errors import PersistenceError
from podcast_crawler.logging_config import setup_logging

logger = setup_logging(__name__)


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Cursor]:
    """
    Context manager for a database transaction with automatic rollback.

    The transaction is committed when the block exits normally and rolled
    back when it raises. sqlite3 errors are re-raised as PersistenceError;
    any other exception propagates unchanged after the rollback.

    Parameters:
    conn: SQLite connection object

    Yields:
    sqlite3.Cursor: Database cursor for executing queries

    Example:
        >>> with transaction(conn) as cursor:
        ...     cursor.execute("UPDATE podcasts SET title = ? WHERE id = ?", ('The Daily', 1))
    """
    cursor = conn.cursor()
    try:
        cursor.execute("BEGIN")
        logger.debug("Transaction started")
        yield cursor
        conn.commit()
        logger.debug("Transaction committed")
    except sqlite3.Error as e:
        _rollback(conn)
        raise PersistenceError(f"Transaction failed: {e}") from e
    except Exception:
        _rollback(conn)
        raise


def _rollback(conn: sqlite3.Connection) -> None:
    try:
        conn.rollback()
        logger.debug("Transaction rolled back")
    except sqlite3.Error as rollback_error:
        logger.error(f"Error during rollback: {rollback_error}")
