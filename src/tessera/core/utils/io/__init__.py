"""File I/O helpers (text, YAML, JSON)."""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_parent_dir,
    read_text,
    write_text,
)
from .json import read_json, write_json_atomic
from .yaml import dump_yaml_string, read_yaml

__all__ = [
    "PathLike",
    "atomic_write",
    "ensure_parent_dir",
    "read_text",
    "write_text",
    "read_json",
    "write_json_atomic",
    "read_yaml",
    "dump_yaml_string",
]
