"""
Logging configuration
"""
import logging
import sys
from menuisland.config import get_settings

settings = get_settings()

# HTTP client libraries log every outbound request at INFO; one menu view in a
# new language can mean dozens of translation calls
QUIET_LOGGERS = ("httpx", "httpcore", "anthropic")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance.

    Called once for the package logger ("menuisland"); module loggers created
    with logging.getLogger(__name__) inherit its handler and level.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    for quiet in QUIET_LOGGERS:
        logging.getLogger(quiet).setLevel(logging.DEBUG if settings.DEBUG else logging.WARNING)

    return logger
