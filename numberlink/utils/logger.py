"""Logging helpers shared by the solvers, loaders and command line."""

from __future__ import annotations

import logging
from typing import Optional


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging with a compact one-line formatter.

    The search simulates a great many boards, so per-step output stays at
    DEBUG and only outcomes reach INFO. Call again with ``logging.DEBUG`` to
    follow every forced move.
    """

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger. Handlers are left to `configure_logging`."""

    return logging.getLogger(name or "numberlink")
