"""
tessera data resource helpers.

Provides access to the bundled configuration defaults and JSON schemas
using importlib.resources.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a data file or directory.

    Args:
        subpackage: Name of the data subdirectory (e.g., "config", "schemas")
        filename: Optional filename within the subdirectory

    Returns:
        Absolute path to the file or directory

    Example:
        >>> get_data_path("config", "defaults.yaml")
        PosixPath('/path/to/tessera/data/config/defaults.yaml')
    """
    pkg = resources.files("tessera.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=32)
def read_yaml(subpackage: str, filename: str) -> dict[str, Any]:
    """
    Read and parse a YAML data file (cached).

    Callers must not mutate the returned mapping; copy it first.
    """
    path = get_data_path(subpackage, filename)
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def list_files(subpackage: str, pattern: str = "*") -> list[Path]:
    """List files matching pattern in a data subdirectory."""
    return sorted(get_data_path(subpackage).glob(pattern))


def clear_caches() -> None:
    """Clear all read caches (useful for testing)."""
    read_yaml.cache_clear()


__all__ = [
    "get_data_path",
    "read_yaml",
    "list_files",
    "clear_caches",
]
