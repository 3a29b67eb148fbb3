"""
Input validation utilities for the podcast crawler.
"""

from urllib.parse import urlparse
from typing import Tuple, Optional


# Validation constants
MAX_URL_LENGTH = 2048
ALLOWED_URL_SCHEMES = ('http', 'https')


def validate_feed_url(url: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a feed URL format.

    Parameters:
    url: str - URL to validate

    Returns:
    Tuple[bool, Optional[str]]: (is_valid, error_message)
        - If valid: (True, None)
        - If invalid: (False, error_message)

    Example:
        >>> is_valid, error = validate_feed_url("https://feeds.example.com/podcast.rss")
        >>> if not is_valid:
        ...     print(f"Invalid URL: {error}")
    """
    if not url:
        return False, "URL cannot be empty"

    if not isinstance(url, str):
        return False, f"URL must be a string, got {type(url).__name__}"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL exceeds maximum length of {MAX_URL_LENGTH} characters"

    if not url.strip():
        return False, "URL cannot be whitespace only"

    try:
        parsed = urlparse(url.strip())
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if not parsed.scheme:
        return False, "URL must include a scheme (http:// or https://)"

    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        return False, f"URL scheme must be one of {ALLOWED_URL_SCHEMES}, got '{parsed.scheme}'"

    if not parsed.netloc:
        return False, "URL must include a domain name"

    return True, None


def read_feeds_file(lines) -> list:
    """
    Extract feed URLs from the lines of a feeds file.

    Blank lines and lines starting with '#' are ignored; duplicates keep
    their first position.

    Parameters:
    lines: Iterable of raw lines

    Returns:
    list: Feed URLs in file order
    """
    feeds = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if line not in feeds:
            feeds.append(line)
    return feeds
