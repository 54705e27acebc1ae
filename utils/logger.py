"""
utils/logger.py
---------------
Logging setup for the persistence layer.

Modules obtain their logger with `get_logger(__name__)`. The first call
installs one stdout handler on the root logger, at the level named by
``LOG_LEVEL``. If the host application has already configured root
handlers, they are left alone and records flow to them instead.
"""

import logging
import sys

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_configured = False


def resolve_level(name: str) -> int:
    """Map a level name such as "debug" to its number. Unknown names give INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _configure() -> None:
    global _configured
    if _configured:
        return
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)
        root.setLevel(resolve_level(LOG_LEVEL))
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger, configuring logging on first use.

    Args:
        name: Usually ``__name__`` of the calling module.
    """
    _configure()
    return logging.getLogger(name)
