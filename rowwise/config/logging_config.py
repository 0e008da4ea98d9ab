"""Logging configuration for the rowwise tools."""
import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV_VAR = "ROWWISE_LOG_LEVEL"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def default_log_level(fallback: str = "WARNING") -> str:
    """Log level from the ROWWISE_LOG_LEVEL environment variable, or `fallback`."""
    return os.environ.get(LOG_LEVEL_ENV_VAR, fallback).upper()


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, logs to stdout.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    config = {
        'level': numeric_level,
        'format': LOG_FORMAT,
    }

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        config['filename'] = log_file
    else:
        config['stream'] = sys.stdout

    logging.basicConfig(**config)

    logging.info("Logging initialized at %s level", level.upper())


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name, typically __name__ from the calling module

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
