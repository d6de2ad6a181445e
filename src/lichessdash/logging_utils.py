"""Logging helpers shared by the gateway and the library.

Every module logs through :func:`get_logger`, which attaches a single
stdout handler per logger name.  :func:`set_level` applies the configured
``LICHESSDASH_LOG_LEVEL`` to the package loggers and to uvicorn.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_ROOT_LOGGERS = ("lichessdash", "lichessdash_server", "uvicorn")
_PREFIXES = ("lichessdash.", "lichessdash_server.")


def get_logger(name: str = "lichessdash", level: int = logging.INFO) -> logging.Logger:
    """Return a logger that writes to stdout.

    Repeated calls with the same *name* return the same logger without
    adding another handler.

    Args:
        name: Logger name, usually the caller's ``__name__``.
        level: Initial level, applied only when the logger is first set up.

    Returns:
        A configured :class:`logging.Logger`.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def set_level(level: int | str) -> None:
    """Set the level of every lichessdash logger and of uvicorn.

    Args:
        level: A numeric level or a level name such as ``"DEBUG"``.
            Unknown names fall back to ``INFO``.
    """
    level = _resolve_level(level)
    for logger_name in _ROOT_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)
    for existing in list(logging.root.manager.loggerDict):
        if existing.startswith(_PREFIXES):
            logging.getLogger(existing).setLevel(level)
