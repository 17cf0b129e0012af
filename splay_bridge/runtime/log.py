from __future__ import annotations
import logging
import sys
from typing import Dict

ROOT_LOGGER = "splay_bridge"

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_HANDLER_TAG = "_splay_bridge_handler"


def parse_level(level: str) -> int:
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def configure_logging(level: str = "INFO", fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s") -> logging.Logger:
    """Attach one stderr handler to the package logger. Safe to call repeatedly."""
    logger = logging.getLogger(ROOT_LOGGER)
    level_int = parse_level(level)
    logger.setLevel(level_int)
    for h in list(logger.handlers):
        if getattr(h, _HANDLER_TAG, False):
            logger.removeHandler(h)
            h.close()
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level_int)
    sh.setFormatter(logging.Formatter(fmt))
    setattr(sh, _HANDLER_TAG, True)
    logger.addHandler(sh)
    return logger
