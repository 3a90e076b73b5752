"""
StubServer Logging

Log sink bootstrap: an append-only timestamped log file, plus a console
mirror in verbose mode.
"""

import logging
import sys
from typing import List

from .errors import LogSinkError

LOGGER_NAME = "stubserver"
LOG_FORMAT = "%(asctime)s %(levelname)s: %(name)s %(message)s"

# Handlers attached by configure_logging, so a second call replaces them
_installed_handlers: List[logging.Handler] = []


def configure_logging(output_file: str, verbose: bool = False, log_level: str = "info") -> logging.Logger:
    """
    Attach the log file (and console mirror) to the ``stubserver`` logger.

    Args:
        output_file: Log file, opened for append and created if missing
        verbose: Mirror records to stdout and log at DEBUG level
        log_level: Level name used when not verbose

    Returns:
        The configured ``stubserver`` logger

    Raises:
        LogSinkError: If the log file cannot be opened
    """
    logger = logging.getLogger(LOGGER_NAME)

    try:
        file_handler = logging.FileHandler(output_file, mode='a', encoding='utf-8')
    except OSError as e:
        raise LogSinkError(output_file, e.strerror or str(e)) from e

    for handler in _installed_handlers:
        logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler.setFormatter(formatter)
    handlers: List[logging.Handler] = [file_handler]

    if verbose:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)
        _installed_handlers.append(handler)

    level = logging.DEBUG if verbose else getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)
    return logger
