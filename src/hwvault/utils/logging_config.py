"""
Logging configuration for command-line use.

Library modules only create ``logging.getLogger(__name__)`` loggers and never
attach handlers. Front ends (the CLI, scripts) call ``setup_logging`` once.
"""

import logging
import sys

# Default logging format
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """
    Attach a single stderr handler to the package logger.

    Calling this more than once replaces the previous handler instead of
    stacking duplicates. Output goes to stderr so JSON written to stdout
    stays clean.

    Args:
        level: One of DEBUG, INFO, WARNING, ERROR

    Returns:
        logging.Logger: The configured ``hwvault`` logger
    """
    level = level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")

    logger = logging.getLogger("hwvault")
    for handler in list(logger.handlers):
        if getattr(handler, "_hwvault_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    handler._hwvault_handler = True
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level))
    logger.propagate = False

    return logger
