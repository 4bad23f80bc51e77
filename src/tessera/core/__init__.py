"""tessera core: catalog, bundle parsing and composition."""
from __future__ import annotations

from .errors import (
    CatalogError,
    CompatibilityError,
    ConfigError,
    MergeError,
    ParseError,
    TesseraError,
)

__all__ = [
    "TesseraError",
    "CatalogError",
    "CompatibilityError",
    "ConfigError",
    "ParseError",
    "MergeError",
]
