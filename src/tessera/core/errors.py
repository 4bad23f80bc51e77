"""Error taxonomy for tessera.

Every error can be attributed to a bundle id and, where applicable, a file
path; both are rendered into the message so user-visible failures always
name their origin.
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from tessera.core.catalog.catalog import CompatibilityReport


class TesseraError(Exception):
    """Base error for catalog, parsing and composition failures."""

    def __init__(
        self,
        message: str,
        *,
        bundle_id: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> None:
        self.message = message
        self.bundle_id = bundle_id
        self.path = Path(path) if path is not None else None
        super().__init__(self._render())

    def _render(self) -> str:
        origin = []
        if self.bundle_id:
            origin.append(f"bundle '{self.bundle_id}'")
        if self.path is not None:
            origin.append(str(self.path))
        if not origin:
            return self.message
        return f"{self.message} ({', '.join(origin)})"


class CatalogError(TesseraError):
    """Raised when a metadata entry is malformed, unreadable or unknown."""


class CompatibilityError(CatalogError):
    """Raised when a caller opts in to failing on declared conflicts."""

    def __init__(self, message: str, report: "CompatibilityReport") -> None:
        self.report = report
        super().__init__(message)


class ConfigError(TesseraError):
    """Raised when the project configuration file cannot be read or parsed."""


class ParseError(TesseraError):
    """Raised when a bundle (or one of its files) cannot be parsed."""


class MergeError(TesseraError):
    """Raised for pathological merge input (duplicate bundles, nameless artifacts)."""


__all__ = [
    "TesseraError",
    "CatalogError",
    "CompatibilityError",
    "ParseError",
    "MergeError",
]
