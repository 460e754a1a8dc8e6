"""
Logging setup for the gmd-dump and gmd-check tools.

The library itself only creates loggers; applications embedding it configure
logging however they like.
"""
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Send the 'gmdtools' loggers to stderr, and to `log_file` when given.

    Args:
        level: Logging level (e.g. logging.DEBUG for the tools' --verbose)
        log_file: Path from the tools' --log-file option; overwritten.
    """
    logger = logging.getLogger("gmdtools")
    logger.setLevel(level)

    # Running a tool twice in one process replaces the earlier handlers.
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    # stdout belongs to the dump and check reports.
    formatter = logging.Formatter('%(levelname)s: %(name)s: %(message)s')
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
