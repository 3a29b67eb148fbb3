"""
Centralized logging configuration for the podcast crawler.

All modules obtain their logger through setup_logging(__name__) so that the
whole package shares one dictConfig-based configuration. Console output goes
to stderr; stdout is reserved for the crawl failure reports.
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Optional
from podcast_crawler import config

# Track if logging has been configured to avoid reconfiguration
_logging_configured = False


def _get_logging_config() -> dict:
    """
    Build logging configuration dictionary.

    Returns:
    dict: Logging configuration for dictConfig()
    """
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    logging_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': log_level,
                'formatter': 'standard',
                'stream': sys.stderr
            }
        },
        'loggers': {
            'podcast_crawler': {
                'level': log_level,
                'handlers': ['console'],
                'propagate': False
            }
        }
    }

    if config.LOG_FILE:
        try:
            log_path = Path(config.LOG_FILE)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            logging_config['handlers']['file'] = {
                'class': 'logging.FileHandler',
                'level': log_level,
                'formatter': 'detailed',
                'filename': config.LOG_FILE,
                'mode': 'a',
                'encoding': 'utf-8'
            }
            logging_config['loggers']['podcast_crawler']['handlers'].append('file')
        except OSError as e:
            # If file logging fails, log to console only
            print(f"Warning: Could not set up file logging to {config.LOG_FILE}: {e}", file=sys.stderr)

    return logging_config


def configure_logging(force: bool = False) -> None:
    """
    Configure logging for the entire package.

    Subsequent calls are no-ops unless force is True, which lets the CLI
    re-apply the configuration after changing config.LOG_LEVEL.

    Parameters:
    force: Rebuild the configuration even if it was already applied
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    logging.config.dictConfig(_get_logging_config())
    _logging_configured = True


def setup_logging(logger_name: Optional[str] = None) -> logging.Logger:
    """
    Return a logger under the podcast_crawler namespace.

    Parameters:
    logger_name: Name of the logger (typically __name__). If None, uses the package logger.

    Returns:
    logging.Logger: Configured logger instance

    Example:
        >>> from podcast_crawler.logging_config import setup_logging
        >>> logger = setup_logging(__name__)
        >>> logger.info("This will be logged")
    """
    configure_logging()

    if not logger_name:
        return logging.getLogger('podcast_crawler')
    if not logger_name.startswith('podcast_crawler'):
        logger_name = f'podcast_crawler.{logger_name}'
    return logging.getLogger(logger_name)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Convenience alias for setup_logging()."""
    return setup_logging(name)


# Configure logging when module is imported
configure_logging()
