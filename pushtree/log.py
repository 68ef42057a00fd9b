"""Logger construction for a single pushtree run."""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "pushtree"


def build_logger(level: str = "INFO") -> logging.Logger:
    """
    Build the run's logger: one stderr handler, no propagation to the root.

    Called once by the CLI; the result is passed explicitly to the collector
    and the publisher.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False
    return logger
