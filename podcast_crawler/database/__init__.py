"""
Record store: connection management, schema and the SQLite store.
"""

from podcast_crawler.database.connection import (
    is_valid_database,
    get_db_connection
)
from podcast_crawler.database.queries import (
    table_exists,
    count_episodes,
    episode_counts,
    guid_exists
)
from podcast_crawler.database.schema import (
    create_tables_if_not_exist,
    explain_query_plan
)
from podcast_crawler.database.transactions import transaction
from podcast_crawler.database.store import RecordStore, SQLiteRecordStore

__all__ = [
    'is_valid_database',
    'get_db_connection',
    'table_exists',
    'count_episodes',
    'episode_counts',
    'guid_exists',
    'create_tables_if_not_exist',
    'explain_query_plan',
    'transaction',
    'RecordStore',
    'SQLiteRecordStore',
]
