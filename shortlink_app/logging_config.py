"""
Logging setup for the shortlink service.

All modules log through ``logging.getLogger(__name__)``; this installs a single
stream handler on the package logger so records from every module share one format.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the package logger once and return it."""
    logger = logging.getLogger("shortlink_app")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
