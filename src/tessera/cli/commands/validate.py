"""
tessera validate command.

SUMMARY: Check a bundle selection for conflicts and missing dependencies
"""

from __future__ import annotations

import argparse
import sys

from tessera.cli import (
    OutputFormatter,
    add_bundle_ids_arg,
    add_catalog_flag,
    add_json_flag,
    get_catalog,
)
from tessera.core.config import ConfigManager
from tessera.core.errors import TesseraError

SUMMARY = "Check a bundle selection for conflicts and missing dependencies"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_bundle_ids_arg(parser)
    add_catalog_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Exit 0 when the selection is compatible, 1 on conflicts or errors."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        catalog = get_catalog(args, ConfigManager())
        for bundle_id in args.bundle_ids:
            catalog.require(bundle_id)
        report = catalog.validate_compatibility(args.bundle_ids)
    except TesseraError as e:
        formatter.error(e, error_code="validate_error")
        return 1

    payload = {
        "compatible": report.compatible,
        "conflicts": [list(pair) for pair in report.conflicts],
        "missing_dependencies": [list(pair) for pair in report.missing_dependencies],
        "unknown_references": [list(pair) for pair in report.unknown_references],
    }
    if formatter.json_mode:
        formatter.json_output(payload)
    else:
        for line in report.messages():
            formatter.text(f"  - {line}")
        formatter.text("Compatible." if report.compatible else "Incompatible selection.")
    return 0 if report.compatible else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
