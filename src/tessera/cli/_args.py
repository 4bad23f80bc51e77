"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse
from pathlib import Path

from tessera.core.catalog import Catalog
from tessera.core.config import ConfigManager


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_catalog_flag(parser: argparse.ArgumentParser) -> None:
    """Add --catalog flag overriding the configured ``catalog.root``."""
    parser.add_argument(
        "--catalog",
        type=str,
        help="Catalog root directory (default: catalog.root from config)",
    )


def add_dry_run_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="Show what would be written without making changes",
    )


def add_bundle_ids_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "bundle_ids",
        nargs="+",
        metavar="ID",
        help="Bundle ids to select",
    )


def get_catalog(args: argparse.Namespace, config: ConfigManager) -> Catalog:
    """Build and initialize the catalog selected by ``--catalog`` or config."""
    root = getattr(args, "catalog", None)
    catalog = Catalog(Path(root) if root else None, config=config)
    catalog.initialize()
    return catalog


__all__ = [
    "add_json_flag",
    "add_catalog_flag",
    "add_dry_run_flag",
    "add_bundle_ids_arg",
    "get_catalog",
]
