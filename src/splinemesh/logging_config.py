"""
Logging Configuration
The library modules only create `logging.getLogger(__name__)` loggers and
never attach handlers. Hosts that want to see curve rebuilds and bender
recomputations call `setup_logging` once, the demo does so on startup.
"""
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Attach console (and optionally file) handlers to the 'splinemesh' logger.

    Calling it again replaces the handlers, so a host can switch level or log
    file at runtime.

    Args:
        level: Logging level, logging.DEBUG shows every path edit and bend.
        log_file: Optional path of a log file, overwritten on each call.
    """
    logger = logging.getLogger("splinemesh")
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    # Format: Time - Module - Level - Message
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug(f"splinemesh logging at level {logging.getLevelName(level)}.")
