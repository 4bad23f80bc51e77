"""Bundle metadata records and descriptor loading.

A bundle descriptor (``bundle.yaml``) sits in each bundle directory:

    ```yaml
    id: nextjs-15
    name: Next.js 15
    version: 15.0.0
    category: framework
    priority: 10
    conflicts: [remix]
    sections:
      - title: Critical Next.js 15 Changes
        mergeable: false
        priority: 15
    ```
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import yaml

from tessera.core.errors import CatalogError
from tessera.core.schemas import validate_payload_safe
from tessera.core.utils.io import read_yaml

DESCRIPTOR_NAMES: Tuple[str, ...] = ("bundle.yaml", "bundle.yml")


class Category(Enum):
    """Bundle category."""
    FRAMEWORK = "framework"
    UI = "ui"
    TOOLING = "tooling"
    TESTING = "testing"
    DATABASE = "database"
    API = "api"
    SERVER_INTEGRATION = "server-integration"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Resolve a category from its value or a folder alias.

        Raises:
            ValueError: If the value names no category.
        """
        if isinstance(value, Category):
            return value
        key = str(value or "").strip().lower()
        key = CATEGORY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            allowed = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown category '{value}' (expected one of: {allowed})") from None


# Folder names used by bundle trees
CATEGORY_ALIASES: Dict[str, str] = {
    "frameworks": "framework",
    "tools": "tooling",
    "tests": "testing",
    "databases": "database",
    "apis": "api",
    "servers": "server-integration",
    "mcp-server": "server-integration",
    "mcp-servers": "server-integration",
}


@dataclass(frozen=True)
class SectionPolicy:
    """How a bundle wants one titled section of its own document composed."""
    title: str
    mergeable: bool = True
    priority: int = 0


@dataclass(frozen=True)
class BundleMetadata:
    id: str
    name: str
    category: Category
    path: Path
    version: str = "0.0.0"
    description: str = ""
    priority: int = 0
    dependencies: Tuple[str, ...] = ()
    conflicts: Tuple[str, ...] = ()
    sections: Tuple[SectionPolicy, ...] = field(default=())

    def section_policy(self, title: str) -> Optional[SectionPolicy]:
        """Return the declared policy for ``title`` (exact match after trimming)."""
        wanted = title.strip()
        for policy in self.sections:
            if policy.title.strip() == wanted:
                return policy
        return None

    def is_exclusive(self, title: str) -> bool:
        policy = self.section_policy(title)
        return policy is not None and not policy.mergeable


def _id_list(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(str(v).strip() for v in value if str(v).strip())


def _sections(value: Iterable[Mapping[str, Any]]) -> Tuple[SectionPolicy, ...]:
    return tuple(
        SectionPolicy(
            title=str(raw["title"]).strip(),
            mergeable=bool(raw.get("mergeable", True)),
            priority=int(raw.get("priority", 0)),
        )
        for raw in value or ()
    )


def metadata_from_mapping(
    data: Mapping[str, Any],
    *,
    base_dir: Path,
    source: Optional[Path] = None,
    default_category: Optional[str] = None,
) -> BundleMetadata:
    """Build and validate ``BundleMetadata`` from a descriptor mapping.

    ``path`` in the descriptor is resolved relative to ``base_dir`` and
    defaults to ``base_dir`` itself. When ``category`` is missing,
    ``default_category`` (typically the parent folder name) is used.

    Raises:
        CatalogError: If the descriptor is structurally invalid.
    """
    if not isinstance(data, Mapping):
        raise CatalogError("Bundle descriptor must be a YAML mapping", path=source)
    bundle_id = str(data.get("id") or "").strip() or None

    issues = validate_payload_safe(dict(data), "bundle-metadata")
    if issues:
        raise CatalogError(
            f"Invalid bundle descriptor: {'; '.join(issues)}",
            bundle_id=bundle_id,
            path=source,
        )

    for key in ("id", "name"):
        if not str(data.get(key) or "").strip():
            raise CatalogError(f"Missing required field: {key}", bundle_id=bundle_id, path=source)

    try:
        category = Category.parse(data.get("category") or default_category)
    except ValueError as exc:
        raise CatalogError(str(exc), bundle_id=bundle_id, path=source) from exc

    raw_path = data.get("path")
    bundle_path = (base_dir / str(raw_path)) if raw_path else base_dir
    if not bundle_path.is_dir():
        raise CatalogError(
            f"Bundle path does not exist: {bundle_path}", bundle_id=bundle_id, path=source
        )

    return BundleMetadata(
        id=str(data["id"]).strip(),
        name=str(data["name"]).strip(),
        version=str(data.get("version") or "0.0.0"),
        description=str(data.get("description") or ""),
        category=category,
        path=bundle_path.resolve(),
        priority=int(data.get("priority") or 0),
        dependencies=_id_list(data.get("dependencies")),
        conflicts=_id_list(data.get("conflicts")),
        sections=_sections(data.get("sections") or ()),
    )


def find_descriptor(bundle_dir: Path, names: Iterable[str] = DESCRIPTOR_NAMES) -> Optional[Path]:
    """Return the first existing descriptor file in ``bundle_dir``."""
    for name in names:
        candidate = bundle_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_bundle_metadata(
    bundle_dir: Path,
    *,
    descriptor_names: Iterable[str] = DESCRIPTOR_NAMES,
    default_category: Optional[str] = None,
) -> BundleMetadata:
    """Read and validate the descriptor of a single bundle directory.

    Raises:
        CatalogError: If no descriptor exists, it cannot be read, or it is invalid.
    """
    bundle_dir = Path(bundle_dir)
    descriptor = find_descriptor(bundle_dir, descriptor_names)
    if descriptor is None:
        raise CatalogError("Bundle descriptor not found", path=bundle_dir)

    try:
        data = read_yaml(descriptor, default={}, raise_on_error=True)
    except (OSError, yaml.YAMLError) as exc:
        raise CatalogError(f"Unreadable bundle descriptor: {exc}", path=descriptor) from exc

    return metadata_from_mapping(
        data,
        base_dir=bundle_dir,
        source=descriptor,
        default_category=default_category if default_category is not None else bundle_dir.parent.name,
    )


__all__ = [
    "Category",
    "CATEGORY_ALIASES",
    "DESCRIPTOR_NAMES",
    "SectionPolicy",
    "BundleMetadata",
    "metadata_from_mapping",
    "find_descriptor",
    "load_bundle_metadata",
]
