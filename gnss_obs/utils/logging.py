"""Logging helpers for the observation estimator."""

from __future__ import annotations

import logging

_ROOT_NAME = "gnss_obs"


def get_logger(name: str = _ROOT_NAME, level: int | None = None) -> logging.Logger:
    """Return a named logger, attaching the package stream handler once.

    Only the package root logger owns a handler; child loggers propagate to it.
    """

    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.WARNING)
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
