"""
Summary generation for crawl results.
"""

from typing import Iterable
import pandas as pd
from podcast_crawler.models import CrawlResult

SUMMARY_COLUMNS = [
    'podcast_id',
    'podcast',
    'operation',
    'status',
    'error',
    'episodes_created',
    'episodes_skipped',
    'episodes_failed',
]


def summarise_crawl(results: Iterable[CrawlResult]) -> pd.DataFrame:
    """
    Tabulate crawl results, one row per operation run.

    Parameters:
    results: CrawlResult objects from CrawlRunner operations

    Returns:
    pandas DataFrame with columns:
        - podcast_id: Id of the crawled podcast
        - podcast: Podcast title at the end of the crawl
        - operation: 'podcast_info' or 'episodes_info'
        - status: 'ok' or 'failed'
        - error: Exception class name for failed operations, None otherwise
        - episodes_created / episodes_skipped / episodes_failed: Ingestion counts
    """
    rows = [
        {
            'podcast_id': result.podcast_id,
            'podcast': result.podcast_title,
            'operation': result.operation,
            'status': 'ok' if result.ok else 'failed',
            'error': result.error_kind,
            'episodes_created': result.episodes_created,
            'episodes_skipped': result.episodes_skipped,
            'episodes_failed': result.episodes_failed,
        }
        for result in results
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def crawl_totals(summary: pd.DataFrame) -> dict:
    """
    Aggregate a crawl summary into headline numbers.

    Returns:
    dict with keys operations, failed, podcasts, podcasts_failed,
    episodes_created, episodes_skipped, episodes_failed
    """
    failed = summary[summary['status'] == 'failed']
    return {
        'operations': len(summary),
        'failed': len(failed),
        'podcasts': int(summary['podcast_id'].nunique()),
        'podcasts_failed': int(failed['podcast_id'].nunique()),
        'episodes_created': int(summary['episodes_created'].sum()),
        'episodes_skipped': int(summary['episodes_skipped'].sum()),
        'episodes_failed': int(summary['episodes_failed'].sum()),
    }


def failures_by_error(summary: pd.DataFrame) -> pd.Series:
    """Count failed operations per exception class, most frequent first."""
    failed = summary[summary['status'] == 'failed']
    return failed['error'].value_counts()
