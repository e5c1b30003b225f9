# logging_config.py
"""Console logging for the gridstore package."""

import logging
import sys

LOGGER_NAME = "gridstore"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level="INFO", stream=None):
    """
    Attach a single stream handler to the ``gridstore`` logger.

    Safe to call more than once: the previous handler is replaced, never
    duplicated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_gridstore_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.setLevel(level)
    handler._gridstore_handler = True
    logger.addHandler(handler)
    return logger
