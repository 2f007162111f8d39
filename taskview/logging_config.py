"""Logging setup for the service process."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "err": logging.ERROR,
    "error": logging.ERROR,
}


def parse_level(value: str | None) -> int:
    """Map a level name to a logging level; unknown names mean INFO."""
    if not isinstance(value, str):
        return logging.INFO
    return _LEVELS.get(value.strip().lower(), logging.INFO)


def configure_logging(level: str | None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(parse_level(level))
