import logging
from typing import Dict

from .config import get_settings

_LOGGERS: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """
    Create or retrieve a named logger.

    Every logger lives under the ``unmapped`` namespace and writes to a
    single console handler, so repeated calls never stack handlers.

    Args:
        name: logger namespace (e.g. session, multiplayer, badges)

    Returns:
        Configured logger instance
    """
    if name in _LOGGERS:
        return _LOGGERS[name]

    logger = logging.getLogger(f"unmapped.{name}")
    logger.setLevel(get_settings().LOG_LEVEL.upper())

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    logger.propagate = False
    _LOGGERS[name] = logger

    return logger
