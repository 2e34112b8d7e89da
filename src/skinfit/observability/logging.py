"""Shared logging utilities for the classifier, recommender and loaders.

Usage example:
    from skinfit.observability.logging import get_logger

    logger = get_logger("skinfit.recommendation")
    logger.info("Ranked %s candidates", candidate_count)
"""

from __future__ import annotations

import logging
import time

_ROOT_LOGGER_NAME = "skinfit"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _build_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
    formatter.converter = time.gmtime
    handler.setFormatter(formatter)
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return a logger with a single UTC-stamped stream handler.

    Args:
        name: Logger name (use a stable module-qualified name under ``skinfit``).

    Returns:
        The named logger, configured once at INFO and not propagating.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(_build_handler())
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def set_log_level(level: int) -> None:
    """Apply ``level`` to every configured ``skinfit`` logger."""
    manager = logging.Logger.manager
    for name, candidate in list(manager.loggerDict.items()):
        if not isinstance(candidate, logging.Logger):
            continue
        if name == _ROOT_LOGGER_NAME or name.startswith(f"{_ROOT_LOGGER_NAME}."):
            candidate.setLevel(level)
