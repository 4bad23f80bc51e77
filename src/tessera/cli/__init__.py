"""
tessera CLI package.

Commands are auto-discovered from ``cli/commands/*.py``; each module exposes
``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
"""
from ._args import (
    add_bundle_ids_arg,
    add_catalog_flag,
    add_dry_run_flag,
    add_json_flag,
    get_catalog,
)
from ._output import OutputFormatter

__all__ = [
    "OutputFormatter",
    "add_json_flag",
    "add_catalog_flag",
    "add_dry_run_flag",
    "add_bundle_ids_arg",
    "get_catalog",
]
