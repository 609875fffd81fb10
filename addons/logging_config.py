import logging
import os
from typing import Optional

DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Client libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ['botocore', 'boto3', 'urllib3', 's3transfer']


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv('LOG_LEVEL') or DEFAULT_LEVEL).upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        return logging.WARNING
    return resolved


def setup_logging(level: Optional[str] = None) -> int:
    """Configure logging for the demo scripts. Returns the effective level."""
    log_level = _resolve_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers
    root_logger.handlers.clear()

    # Diagnostics go to stderr, command output stays on stdout
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(
            log_level if log_level <= logging.DEBUG else logging.WARNING
        )

    return log_level


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name"""
    return logging.getLogger(name)
