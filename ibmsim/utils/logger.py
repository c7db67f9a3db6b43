"""Logging setup shared by all simulator components."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_default_level = logging.INFO


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Create (or fetch) a named logger writing to stderr.

    Args:
        name: Logger name, usually the owning class name
        level: Logging level name; defaults to the global level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(f"ibmsim.{name}")

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(_default_level)

    if level is not None:
        logger.setLevel(_parse_level(level))
    return logger


def set_global_level(level: str) -> None:
    """Set the level of existing and future ibmsim loggers.

    Args:
        level: Logging level name
    """
    global _default_level
    _default_level = _parse_level(level)

    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith("ibmsim.") and isinstance(logger, logging.Logger):
            logger.setLevel(_default_level)


def _parse_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
