"""
tessera list command.

SUMMARY: List bundles in the catalog
"""

from __future__ import annotations

import argparse
import sys

from tessera.cli import OutputFormatter, add_catalog_flag, add_json_flag, get_catalog
from tessera.core.catalog import BundleMetadata, Category
from tessera.core.config import ConfigManager
from tessera.core.errors import TesseraError

SUMMARY = "List bundles in the catalog"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--category",
        type=str,
        help=f"Only list one category ({', '.join(c.value for c in Category)})",
    )
    add_catalog_flag(parser)
    add_json_flag(parser)


def _row(metadata: BundleMetadata) -> dict:
    return {
        "id": metadata.id,
        "name": metadata.name,
        "category": metadata.category.value,
        "version": metadata.version,
        "priority": metadata.priority,
        "description": metadata.description,
        "path": str(metadata.path),
    }


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        catalog = get_catalog(args, ConfigManager())
        if args.category:
            bundles = catalog.get_by_category(args.category)
        else:
            bundles = catalog.get_all()
    except (TesseraError, ValueError) as e:
        formatter.error(e, error_code="list_error")
        return 1

    if formatter.json_mode:
        formatter.json_output({
            "bundles": [_row(m) for m in bundles],
            "errors": [str(e) for e in catalog.errors],
        })
        return 0

    if not bundles:
        formatter.text("No bundles found.")
        return 0
    width = max(len(m.id) for m in bundles)
    for m in bundles:
        line = f"{m.id:<{width}}  [{m.category.value}] {m.name}"
        formatter.text(f"{line} - {m.description}" if m.description else line)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
