"""Shared logger for the calculator package."""
import logging
import sys
from typing import Optional


LOGGER_NAME = "desk_calculator"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger: logging.Logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())

_stream_handler: Optional[logging.Handler] = None


def configure_logging(level: int = logging.INFO) -> None:
    """
    Send package logs to the current stderr at the given level.

    Calling it again replaces the previous stderr handler.

    :param int level: Logging level (e.g. ``logging.DEBUG``)

    :return: None
    """
    global _stream_handler
    if _stream_handler is not None:
        logger.removeHandler(_stream_handler)
    _stream_handler = logging.StreamHandler(sys.stderr)
    _stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_stream_handler)
    logger.setLevel(level)
