from __future__ import annotations

import logging
from typing import Final

from huddle import config

_PACKAGE_LOGGER: Final[str] = "huddle"
_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level() -> int:
    level_name = config.LOG_LEVEL.upper()
    return getattr(logging, level_name, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``huddle`` namespace.

    The stream handler is attached to the package logger rather than the root
    logger, so an embedding application keeps control of its own handlers.
    """
    global _HANDLER_ATTACHED

    level = _resolve_level()
    package_logger = logging.getLogger(_PACKAGE_LOGGER)

    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        package_logger.addHandler(handler)
        package_logger.propagate = False
        _HANDLER_ATTACHED = True
    package_logger.setLevel(level)

    if name != _PACKAGE_LOGGER and not name.startswith(f"{_PACKAGE_LOGGER}."):
        name = f"{_PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
