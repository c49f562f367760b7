"""
Logging setup for the command-line layer
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "callreach"


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Attach a rich handler to the package logger"""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Re-running the CLI in one process (tests) must not stack handlers
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
