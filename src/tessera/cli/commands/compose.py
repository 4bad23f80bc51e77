"""
tessera compose command.

SUMMARY: Compose bundles into an output directory
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from tessera.cli import (
    OutputFormatter,
    add_bundle_ids_arg,
    add_catalog_flag,
    add_dry_run_flag,
    add_json_flag,
    get_catalog,
)
from tessera.core.composition import BundleComposer, write_composition
from tessera.core.config import ConfigManager
from tessera.core.errors import TesseraError

SUMMARY = "Compose bundles into an output directory"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_bundle_ids_arg(parser)
    parser.add_argument(
        "--output",
        "-o",
        required=True,
        help="Directory receiving the composed configuration",
    )
    parser.add_argument(
        "--fail-on-conflict",
        action="store_true",
        default=None,
        help="Abort when selected bundles declare conflicts",
    )
    add_dry_run_flag(parser)
    add_catalog_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    output_dir = Path(args.output)
    try:
        config = ConfigManager()
        catalog = get_catalog(args, config)
        result = BundleComposer(catalog, config=config).compose(
            args.bundle_ids, fail_on_conflict=args.fail_on_conflict
        )
        written = write_composition(result, output_dir, dry_run=args.dry_run, config=config)
    except (TesseraError, OSError) as e:
        formatter.error(e, error_code="compose_error")
        return 1

    files = [str(p) for p in written]
    verb = "Would write" if args.dry_run else "Wrote"
    message_lines = [f"{verb} {len(files)} file(s) from {len(result.bundle_ids)} bundle(s) to {output_dir}"]
    if args.dry_run:
        message_lines += [f"  {f}" for f in files]
    formatter.success(
        {
            "bundles": list(result.bundle_ids),
            "files": files,
            "dry_run": bool(args.dry_run),
            "conflicts": [list(p) for p in result.compatibility.conflicts] if result.compatibility else [],
            "failures": {k: str(v) for k, v in result.failures.items()},
            "diagnostics": [str(d) for d in result.diagnostics],
        },
        "\n".join(message_lines),
    )
    return 1 if result.failures and not result.bundle_ids else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
