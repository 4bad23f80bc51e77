"""Parsed bundle records."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from tessera.core.catalog import BundleMetadata


@dataclass(frozen=True)
class Agent:
    name: str
    description: str
    content: str
    source: str
    tools: Tuple[str, ...] = ()
    path: Optional[Path] = None


@dataclass(frozen=True)
class Command:
    name: str
    description: str
    content: str
    source: str
    allowed_tools: Tuple[str, ...] = ()
    argument_hint: str = ""
    path: Optional[Path] = None


@dataclass(frozen=True)
class Hook:
    """A hook file; ``kind`` is "script" for executables, "config" for JSON."""
    name: str
    kind: str
    content: str
    source: str
    description: str = ""
    path: Optional[Path] = None


@dataclass(frozen=True)
class ParseDiagnostic:
    """A per-file problem collected while parsing a bundle."""
    bundle_id: str
    path: Path
    message: str
    severity: str = "error"

    def __str__(self) -> str:
        return f"[{self.severity}] {self.bundle_id}: {self.path}: {self.message}"


@dataclass(frozen=True)
class Bundle:
    metadata: BundleMetadata
    document: str
    agents: Tuple[Agent, ...] = ()
    commands: Tuple[Command, ...] = ()
    hooks: Tuple[Hook, ...] = ()
    settings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    diagnostics: Tuple[ParseDiagnostic, ...] = ()

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def ok(self) -> bool:
        """True when no file of the bundle produced an error diagnostic."""
        return not any(d.severity == "error" for d in self.diagnostics)


__all__ = ["Agent", "Command", "Hook", "ParseDiagnostic", "Bundle"]
