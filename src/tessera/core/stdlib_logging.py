"""Stdlib logging setup for the tessera CLI.

Library modules only create module loggers (``logging.getLogger(__name__)``);
handlers are installed here, once, by the command-line entry point.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

_TESSERA_HANDLER: Optional[logging.Handler] = None

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str = "WARNING", *, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Install a single stderr handler on the ``tessera`` logger.

    Idempotent per-process: a second call replaces the handler installed by
    the first one instead of stacking another.
    """
    global _TESSERA_HANDLER

    logger = logging.getLogger("tessera")
    logger.setLevel(_level_from_name(level))

    if _TESSERA_HANDLER is not None:
        logger.removeHandler(_TESSERA_HANDLER)
        _TESSERA_HANDLER.close()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)

    _TESSERA_HANDLER = handler
    return logger


def reset_logging_for_tests() -> None:
    """Test-only: remove the handler installed by ``configure_logging``."""
    global _TESSERA_HANDLER
    if _TESSERA_HANDLER is not None:
        logging.getLogger("tessera").removeHandler(_TESSERA_HANDLER)
        _TESSERA_HANDLER.close()
    _TESSERA_HANDLER = None


__all__ = ["configure_logging", "reset_logging_for_tests", "DEFAULT_FORMAT"]
