"""
Configuration constants for the podcast crawler.
"""

# Database Configuration
DB_PATH = 'podcast_search.db'
DB_TIMEOUT = 30.0

# Fetch Configuration
FETCH_TIMEOUT = 30  # Seconds before a feed request is abandoned
USER_AGENT = 'podcast-crawler/1.0'

# Ingestion Configuration
SKIP_INVALID_ENTRIES = False  # True: log and skip a bad entry instead of aborting the crawl
DEDUPE_BY_GUID = False  # True: skip entries whose guid is already stored for the podcast

# Logging Configuration
LOG_LEVEL = 'INFO'  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_FILE = None  # Set to a file path to enable file logging, None for console only

# File Configuration
FEEDS_FILE = 'feeds.txt'

# CLI Configuration
DEFAULT_EPISODE_LIST_LIMIT = 20

# Database Table Names
PODCASTS_TABLE_NAME = 'podcasts'
EPISODES_TABLE_NAME = 'episodes'
