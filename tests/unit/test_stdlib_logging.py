"""Tests for CLI logging setup."""
from __future__ import annotations

import logging

from tessera.core.stdlib_logging import configure_logging


def test_configure_logging_is_idempotent() -> None:
    configure_logging("INFO")
    logger = configure_logging("DEBUG")

    assert logger.name == "tessera"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_module_loggers_propagate_to_tessera(capsys) -> None:
    configure_logging("WARNING", fmt="%(levelname)s:%(message)s")

    logging.getLogger("tessera.core.catalog.catalog").warning("skipped")
    logging.getLogger("tessera.core.catalog.catalog").info("hidden")

    err = capsys.readouterr().err
    assert "WARNING:skipped" in err
    assert "hidden" not in err


def test_unknown_level_falls_back_to_info() -> None:
    assert configure_logging("chatty").level == logging.INFO
