"""
Logging setup for the config-tree command line.
Library modules only call logging.getLogger(__name__); handlers are installed here.
"""
import logging
import os
import sys
from typing import Optional

from .constants import ENV_LOG_LEVEL

LOG_LEVELS = {
    'silent': logging.CRITICAL + 10,
    'error': logging.ERROR,
    'warn': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG,
}

ROOT_LOGGER = 'config_tree'
FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def resolve_level(level: Optional[str] = None) -> int:
    name = (level or os.getenv(ENV_LOG_LEVEL, '') or 'warn').lower()
    return LOG_LEVELS.get(name, logging.WARNING)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(resolve_level(level))

    for handler in log.handlers:
        if getattr(handler, "_config_tree", False):
            handler.setStream(sys.stderr)
            break
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(FORMAT))
        handler._config_tree = True
        log.addHandler(handler)
    return log
