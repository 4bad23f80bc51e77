"""Bundle catalog: loads, validates and indexes bundle metadata.

The catalog is an explicit instance, constructed once per composition run
and read-only after ``initialize()``. Several catalogs may coexist in one
process.

Expected tree::

    <root>/
      frameworks/
        nextjs-15/
          bundle.yaml
          CLAUDE.md
      ui/
        shadcn/
          bundle.yaml
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from tessera.core.config import ConfigManager
from tessera.core.errors import CatalogError

from .metadata import (
    DESCRIPTOR_NAMES,
    BundleMetadata,
    Category,
    find_descriptor,
    load_bundle_metadata,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def order_by_priority(items: Iterable[T], key: Callable[[T], int]) -> List[T]:
    """Sort ``items`` by priority, highest first.

    Python's sort is stable, so items with equal priority keep their input
    order.
    """
    return sorted(items, key=lambda item: -key(item))


@dataclass(frozen=True)
class CompatibilityReport:
    """Result of ``Catalog.validate_compatibility``.

    Only ``conflicts`` affect ``compatible``; missing dependencies and
    references to unknown ids are advisory.
    """
    compatible: bool
    conflicts: Tuple[Tuple[str, str], ...] = ()
    missing_dependencies: Tuple[Tuple[str, str], ...] = ()
    unknown_references: Tuple[Tuple[str, str], ...] = ()

    def messages(self) -> List[str]:
        """Human-readable lines describing every finding."""
        lines = [f"{a} conflicts with {b}" for a, b in self.conflicts]
        lines += [f"{a} requires {b}" for a, b in self.missing_dependencies]
        lines += [f"{a} references unknown bundle {b}" for a, b in self.unknown_references]
        return lines


class Catalog:
    """Index of bundle metadata found under a root directory."""

    def __init__(
        self,
        root: Union[str, Path, None] = None,
        *,
        config: Optional[ConfigManager] = None,
    ) -> None:
        self.config = config or ConfigManager()
        if root is None:
            root = self.config.project_root / str(self.config.get("catalog.root", "configurations"))
        self.root = Path(root)
        self.descriptor_names: Tuple[str, ...] = tuple(
            self.config.get("catalog.descriptor_names") or DESCRIPTOR_NAMES
        )
        self._index: Dict[str, BundleMetadata] = {}
        self._errors: List[CatalogError] = []
        self._initialized = False

    # ------- Loading -------

    def _iter_bundle_dirs(self) -> Iterable[Path]:
        """Yield ``<category>/<bundle-id>/`` directories holding a descriptor."""
        for category_dir in sorted(p for p in self.root.iterdir() if p.is_dir()):
            if category_dir.name.startswith((".", "_")):
                continue
            for bundle_dir in sorted(p for p in category_dir.iterdir() if p.is_dir()):
                if bundle_dir.name.startswith((".", "_")):
                    continue
                if find_descriptor(bundle_dir, self.descriptor_names) is None:
                    logger.debug("Skipping %s: no bundle descriptor", bundle_dir)
                    continue
                yield bundle_dir

    def initialize(self) -> List[CatalogError]:
        """Scan the tree once and build the id index.

        Invalid entries are skipped and reported; they never prevent the
        rest of the catalog from loading. Repeated calls are no-ops.

        Returns:
            Errors for the entries that were skipped.

        Raises:
            CatalogError: If the root directory itself does not exist.
        """
        if self._initialized:
            return list(self._errors)
        if not self.root.is_dir():
            raise CatalogError(f"Catalog root not found: {self.root}", path=self.root)

        for bundle_dir in self._iter_bundle_dirs():
            try:
                metadata = load_bundle_metadata(
                    bundle_dir, descriptor_names=self.descriptor_names
                )
                if metadata.id in self._index:
                    raise CatalogError(
                        f"Duplicate bundle id (already defined at {self._index[metadata.id].path})",
                        bundle_id=metadata.id,
                        path=bundle_dir,
                    )
            except CatalogError as exc:
                logger.warning("Skipping invalid bundle entry: %s", exc)
                self._errors.append(exc)
                continue
            self._index[metadata.id] = metadata

        self._initialized = True
        logger.debug("Catalog loaded %d bundle(s) from %s", len(self._index), self.root)
        return list(self._errors)

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self.initialize()

    @property
    def errors(self) -> List[CatalogError]:
        return list(self._errors)

    # ------- Lookups -------

    def get(self, bundle_id: str) -> Optional[BundleMetadata]:
        """Return metadata for ``bundle_id`` or None when unknown."""
        self._ensure_initialized()
        return self._index.get(bundle_id)

    def require(self, bundle_id: str) -> BundleMetadata:
        metadata = self.get(bundle_id)
        if metadata is None:
            raise CatalogError("Unknown bundle id", bundle_id=bundle_id)
        return metadata

    def __contains__(self, bundle_id: object) -> bool:
        self._ensure_initialized()
        return bundle_id in self._index

    def __len__(self) -> int:
        self._ensure_initialized()
        return len(self._index)

    def get_all(self) -> List[BundleMetadata]:
        """All bundles, highest priority first (ties by id)."""
        self._ensure_initialized()
        by_id = sorted(self._index.values(), key=lambda m: m.id)
        return order_by_priority(by_id, key=lambda m: m.priority)

    def get_by_category(self, category: Union[Category, str]) -> List[BundleMetadata]:
        wanted = Category.parse(category)
        return [m for m in self.get_all() if m.category is wanted]

    # ------- Compatibility -------

    def validate_compatibility(self, bundle_ids: Sequence[str]) -> CompatibilityReport:
        """Cross-reference declared conflicts and dependencies of a selection.

        Unknown selected ids are ignored here; resolving them is the
        caller's job (see ``require``).
        """
        selected = list(dict.fromkeys(bundle_ids))
        chosen = set(selected)
        conflicts: List[Tuple[str, str]] = []
        seen_pairs = set()
        missing: List[Tuple[str, str]] = []
        unknown: List[Tuple[str, str]] = []

        for bundle_id in selected:
            metadata = self.get(bundle_id)
            if metadata is None:
                continue

            for other in metadata.conflicts:
                if other not in self:
                    unknown.append((bundle_id, other))
                if other in chosen and other != bundle_id:
                    pair = frozenset((bundle_id, other))
                    if pair not in seen_pairs:
                        seen_pairs.add(pair)
                        conflicts.append((bundle_id, other))

            for dep in metadata.dependencies:
                if dep not in self:
                    unknown.append((bundle_id, dep))
                if dep not in chosen:
                    missing.append((bundle_id, dep))

        for bundle_id, ref in unknown:
            logger.warning("Bundle '%s' references unknown bundle '%s'", bundle_id, ref)

        return CompatibilityReport(
            compatible=not conflicts,
            conflicts=tuple(conflicts),
            missing_dependencies=tuple(missing),
            unknown_references=tuple(unknown),
        )


__all__ = ["Catalog", "CompatibilityReport", "order_by_priority"]
