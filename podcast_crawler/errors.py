"""
Exception taxonomy for the podcast crawler.

Lower layers wrap library exceptions (requests, sqlite3) into these types so
that callers only need to know about the crawler's own errors.
"""


class CrawlerError(Exception):
    """Base exception for all crawler errors."""
    pass


class FetchError(CrawlerError):
    """Raised when a feed cannot be retrieved (network, timeout, non-2xx status)."""
    pass


class ParseError(CrawlerError):
    """Raised when a feed document is malformed or in an unsupported format."""
    pass


class DurationFormatError(CrawlerError):
    """Raised when an itunes:duration value cannot be converted to seconds."""
    pass


class PersistenceError(CrawlerError):
    """Raised when the record store rejects a read or write."""
    pass


class ValidationError(CrawlerError):
    """Raised when input validation fails."""
    pass
