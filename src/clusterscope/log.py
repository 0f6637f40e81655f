"""Logging setup for the dashboard process.

The dashboard draws on the whole terminal, so log records never go to
stdout/stderr while it runs. Without a log file, logging is silenced with a
NullHandler on the package logger.
"""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(log_file: Path | None, level: str = "INFO") -> None:
    """Route clusterscope logs to a file.

    Args:
        log_file: File to append records to, or None to discard them
        level: Level name for the clusterscope logger (e.g. "DEBUG")
    """
    logger = logging.getLogger("clusterscope")
    logger.setLevel(level.upper())
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file is None:
        logger.addHandler(logging.NullHandler())
        return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
