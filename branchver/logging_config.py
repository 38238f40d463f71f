"""
Logging configuration for branchver.

Centralized logging setup so every module can use the shared loguru
logger and output stays coordinated with the Rich console.
"""

import sys

from loguru import logger
from rich.console import Console

LOG_FORMAT = '<green>{time:YYYY/MM/DD HH:mm:ss}</green> | {level.icon}  - <level>{message}</level>'


def setup_logging(log_level: str = 'INFO', console: Console = None) -> None:
    """
    Set up logging configuration with shared Rich console.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console: Rich Console instance for coordinated output (optional)
    """
    logger.remove()
    
    if console:
        logger.add(
            lambda msg: console.print(msg, end='', markup=False, highlight=False),
            level=log_level,
            format=LOG_FORMAT,
        )
    else:
        # Logs go to stderr so stdout can carry machine readable output
        logger.add(
            sys.stderr,
            level=log_level,
            format=LOG_FORMAT,
            colorize=True,
        )
