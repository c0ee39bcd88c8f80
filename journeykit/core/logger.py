"""
Console logging for journeykit commands

Journeys prompt on stdout, so log records go to stderr and stay quiet
(warnings and up) unless a command runs with --verbose.
"""

from loguru import logger
import sys

QUIET_FORMAT = "<level>{level}</level>: {message}"
VERBOSE_FORMAT = ("<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
                  "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>")


def setup_logger(verbose: bool = False, sink=None):
    """
    Route journeykit logs to a single sink

    Args:
        verbose: Log debug records with timestamps and source locations
        sink: Destination, stderr by default
    """
    logger.remove()
    logger.add(
        sink or sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format=VERBOSE_FORMAT if verbose else QUIET_FORMAT,
        colorize=sink is None,
    )
    return logger
