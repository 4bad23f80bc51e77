"""Composition pipeline: resolve ids, check compatibility, parse, merge."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from tessera.core.bundles import Agent, Bundle, BundleParser, Command, Hook, ParseDiagnostic
from tessera.core.catalog import Catalog, CompatibilityReport, order_by_priority
from tessera.core.config import ConfigManager
from tessera.core.errors import CompatibilityError, ParseError

from .artifacts import merge_agents, merge_commands, merge_hooks
from .document import SectionMerger
from .settings import merge_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompositionResult:
    """Everything produced by one ``BundleComposer.compose`` call."""

    bundle_ids: Tuple[str, ...]
    document: str
    agents: Tuple[Agent, ...] = ()
    commands: Tuple[Command, ...] = ()
    hooks: Tuple[Hook, ...] = ()
    settings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    diagnostics: Tuple[ParseDiagnostic, ...] = ()
    failures: Mapping[str, ParseError] = field(default_factory=lambda: MappingProxyType({}))
    compatibility: Optional[CompatibilityReport] = None

    @property
    def ok(self) -> bool:
        """True when every selected bundle parsed and nothing conflicts."""
        compatible = self.compatibility is None or self.compatibility.compatible
        return not self.failures and compatible


class BundleComposer:
    """Compose catalog bundles into a single configuration.

    Example:
        >>> catalog = Catalog("configurations")
        >>> result = BundleComposer(catalog).compose(["nextjs-15", "shadcn"])
        >>> print(result.document)
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        parser: Optional[BundleParser] = None,
        config: Optional[ConfigManager] = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or ConfigManager()
        self.parser = parser or BundleParser(self.config)
        self.section_merger = SectionMerger(self.config)

    def compose(
        self,
        bundle_ids: Iterable[str],
        *,
        fail_on_conflict: Optional[bool] = None,
    ) -> CompositionResult:
        """Compose the selected bundles.

        Raises:
            CatalogError: If an id is not in the catalog.
            CompatibilityError: If conflicts exist and ``fail_on_conflict``
                is enabled (explicitly or via ``compose.fail_on_conflict``).
        """
        if fail_on_conflict is None:
            fail_on_conflict = bool(self.config.get("compose.fail_on_conflict", False))

        selected = [self.catalog.require(bid) for bid in dict.fromkeys(bundle_ids)]
        ids = [m.id for m in selected]
        logger.info("Composing %d bundle(s): %s", len(ids), ", ".join(ids))

        report = self.catalog.validate_compatibility(ids)
        if report.conflicts:
            message = "; ".join(f"{a} conflicts with {b}" for a, b in report.conflicts)
            if fail_on_conflict:
                raise CompatibilityError(f"Incompatible bundles: {message}", report)
            logger.warning("Incompatible bundles selected: %s", message)
        for bundle_id, dep in report.missing_dependencies:
            logger.warning("Bundle '%s' depends on '%s', which is not selected", bundle_id, dep)

        bundles, failures = self.parser.parse_many(
            [(m.path, m) for m in selected],
            max_workers=self.config.get("compose.max_workers"),
        )
        return self._merge(bundles, failures, report)

    def _merge(
        self,
        bundles: List[Bundle],
        failures: Dict[str, ParseError],
        report: CompatibilityReport,
    ) -> CompositionResult:
        # Highest priority first for the document; artifact and settings
        # groups run lowest first so the highest priority writes last.
        ordered = order_by_priority(bundles, key=lambda b: b.metadata.priority)
        ascending = list(reversed(ordered))

        document = self.section_merger.merge_bundles(ordered)
        agents = merge_agents(b.agents for b in ascending)
        commands = merge_commands(b.commands for b in ascending)
        hooks = merge_hooks(b.hooks for b in ascending)
        settings = merge_settings(b.settings for b in ascending)
        diagnostics = tuple(d for b in ordered for d in b.diagnostics)

        logger.debug(
            "Merged %d agent(s), %d command(s), %d hook(s) from %d bundle(s)",
            len(agents), len(commands), len(hooks), len(ordered),
        )
        return CompositionResult(
            bundle_ids=tuple(b.id for b in ordered),
            document=document,
            agents=agents,
            commands=commands,
            hooks=hooks,
            settings=MappingProxyType(settings),
            diagnostics=diagnostics,
            failures=MappingProxyType(dict(failures)),
            compatibility=report,
        )


__all__ = ["BundleComposer", "CompositionResult"]
