"""
Logging Configuration
Sets up the loggers for the computer and simulator modules.
"""
import logging
import sys
from typing import Optional

LOGGERS = ('computer', 'simulator')


def setup_logging(level: int = logging.WARNING, log_file: Optional[str] = None) -> None:
    """
    Configures the 'computer' and 'simulator' loggers.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    # stderr, so log records never interleave with program output on stdout
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)

    file_handler = None
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)

    for name in LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Avoid duplicate records when called more than once
        if logger.hasHandlers():
            logger.handlers.clear()

        logger.addHandler(console_handler)
        if file_handler:
            logger.addHandler(file_handler)
        logger.propagate = False

    logging.getLogger('simulator').info("Logging initialized.")
