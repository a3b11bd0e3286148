"""Logging for the ``tracker`` package.

``create_app`` calls ``configure_logging`` once with the loaded ``Settings``.
Modules only call ``get_logger("tracker.<module>")``; until the app configures
logging, records go nowhere.
"""

import logging
import sys
from typing import IO

from .settings import Settings

_PKG_LOGGER_NAME = "tracker"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def parse_level(level: str) -> int:
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(settings: Settings, stream: IO[str] = sys.stderr) -> None:
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return
    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.setLevel(parse_level(settings.log_level))
    logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
