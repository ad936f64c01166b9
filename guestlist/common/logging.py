# guestlist/common/logging.py
from __future__ import annotations

import logging
from typing import Optional

ROOT_LOGGER = "guestlist"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = "INFO") -> logging.Logger:
    """
    Set the level for the whole "guestlist" namespace. Entry points (the app
    factory and the admin commands) call this once with LOG_LEVEL. If nothing
    has configured logging yet (no Uvicorn, no test runner), a basicConfig is
    added.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(format=_FORMAT)
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    return root


def get_logger(name: Optional[str] = None, level: int | str | None = None) -> logging.Logger:
    """Return a logger under the "guestlist" namespace. Modules pass __name__."""
    if not name:
        full = ROOT_LOGGER
    elif name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        full = name
    else:
        full = f"{ROOT_LOGGER}.{name}"

    logger = logging.getLogger(full)
    if level is not None:
        logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
