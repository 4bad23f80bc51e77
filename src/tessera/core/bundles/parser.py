"""Bundle parser: turns one bundle directory into a ``Bundle`` record.

Layout (names configurable under ``bundle.*``)::

    <bundle>/
      CLAUDE.md                 primary document (required)
      .claude/
        settings.json           opaque settings object (optional)
        agents/*.md             YAML header + body
        commands/*.md           YAML header + body
        hooks/*.json|*.sh|...   JSON configs or scripts

Per-file failures are collected as diagnostics and never abort sibling
files; only a missing primary document is fatal for the bundle.
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from tessera.core.catalog import (
    BundleMetadata,
    Category,
    find_descriptor,
    load_bundle_metadata,
)
from tessera.core.config import ConfigManager
from tessera.core.errors import CatalogError, ParseError
from tessera.core.schemas import validate_payload_safe
from tessera.core.utils.io import read_json, read_text
from tessera.core.utils.text import parse_frontmatter

from .models import Agent, Bundle, Command, Hook, ParseDiagnostic

logger = logging.getLogger(__name__)

ParseItem = Tuple[Union[str, Path], Optional[BundleMetadata]]


def _tool_list(value: Any) -> Tuple[str, ...]:
    """Normalize a tools header: comma-separated string or list of strings."""
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(str(t).strip() for t in value if str(t).strip())


class BundleParser:
    """Parse bundle directories into immutable ``Bundle`` records.

    The parser holds configuration only; each ``parse`` call reads its own
    subtree and returns a fresh record, so one parser may be shared across
    threads.
    """

    def __init__(self, config: Optional[ConfigManager] = None) -> None:
        cfg = config or ConfigManager()
        bundle_cfg = cfg.section("bundle")
        self.primary_document: str = str(bundle_cfg.get("primary_document") or "CLAUDE.md")
        self.artifact_dir: str = str(bundle_cfg.get("artifact_dir") or "")
        self.settings_file: str = str(bundle_cfg.get("settings_file") or "settings.json")
        self.default_category: str = str(bundle_cfg.get("default_category") or "tooling")
        self.hook_script_extensions: Tuple[str, ...] = tuple(
            bundle_cfg.get("hook_script_extensions") or (".sh", ".js", ".py")
        )
        self.descriptor_names: Tuple[str, ...] = tuple(cfg.get("catalog.descriptor_names") or ())
        self.max_workers: int = int(cfg.get("compose.max_workers") or 1)

    # ------- Public API -------

    def parse(
        self,
        path: Union[str, Path],
        metadata: Optional[BundleMetadata] = None,
    ) -> Bundle:
        """Parse the bundle rooted at ``path``.

        Args:
            path: Bundle directory.
            metadata: Catalog metadata; when omitted it is read from the
                bundle's descriptor or synthesized from the directory name.

        Raises:
            ParseError: If the directory or its primary document is missing
                or unreadable.
        """
        bundle_dir = Path(path)
        if metadata is None:
            metadata = self._resolve_metadata(bundle_dir)
        bundle_id = metadata.id

        if not bundle_dir.is_dir():
            raise ParseError("Bundle directory not found", bundle_id=bundle_id, path=bundle_dir)

        document = self._read_primary_document(bundle_dir, bundle_id)

        diagnostics: List[ParseDiagnostic] = []
        artifact_root = bundle_dir / self.artifact_dir if self.artifact_dir else bundle_dir

        agents = self._collect(artifact_root / "agents", "*.md", bundle_id, diagnostics, self._parse_agent)
        commands = self._collect(artifact_root / "commands", "*.md", bundle_id, diagnostics, self._parse_command)
        hooks = self._collect(artifact_root / "hooks", "*", bundle_id, diagnostics, self._parse_hook)
        settings = self._read_settings(artifact_root / self.settings_file, bundle_id, diagnostics)

        logger.debug(
            "Parsed bundle %s: %d agent(s), %d command(s), %d hook(s), %d diagnostic(s)",
            bundle_id, len(agents), len(commands), len(hooks), len(diagnostics),
        )
        return Bundle(
            metadata=metadata,
            document=document,
            agents=tuple(agents),
            commands=tuple(commands),
            hooks=tuple(hooks),
            settings=MappingProxyType(settings),
            diagnostics=tuple(diagnostics),
        )

    def parse_many(
        self,
        items: Iterable[ParseItem],
        *,
        max_workers: Optional[int] = None,
    ) -> Tuple[List[Bundle], Dict[str, ParseError]]:
        """Parse several bundles; one bundle's failure never stops the others.

        Returns:
            ``(bundles, failures)``: bundles in input order (failed ones
            omitted) and a mapping of bundle id to the ``ParseError`` raised.
        """
        work: Sequence[ParseItem] = list(items)
        workers = max(1, max_workers if max_workers is not None else self.max_workers)

        def _one(item: ParseItem) -> Union[Bundle, ParseError]:
            path, metadata = item
            try:
                return self.parse(path, metadata)
            except ParseError as exc:
                return exc

        if workers > 1 and len(work) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(_one, work))
        else:
            outcomes = [_one(item) for item in work]

        bundles: List[Bundle] = []
        failures: Dict[str, ParseError] = {}
        for (path, metadata), outcome in zip(work, outcomes):
            if isinstance(outcome, ParseError):
                bundle_id = outcome.bundle_id or (metadata.id if metadata else Path(path).name)
                logger.warning("Bundle %s failed to parse: %s", bundle_id, outcome)
                failures[bundle_id] = outcome
            else:
                bundles.append(outcome)
        return bundles, failures

    # ------- Metadata -------

    def _infer_category(self, bundle_dir: Path) -> str:
        try:
            return Category.parse(bundle_dir.parent.name).value
        except ValueError:
            return self.default_category

    def _resolve_metadata(self, bundle_dir: Path) -> BundleMetadata:
        names = self.descriptor_names or ("bundle.yaml", "bundle.yml")
        if find_descriptor(bundle_dir, names) is None:
            return BundleMetadata(
                id=bundle_dir.name,
                name=bundle_dir.name,
                category=Category.parse(self._infer_category(bundle_dir)),
                path=bundle_dir,
            )
        try:
            return load_bundle_metadata(
                bundle_dir,
                descriptor_names=names,
                default_category=self._infer_category(bundle_dir),
            )
        except CatalogError as exc:
            raise ParseError(
                f"Invalid bundle descriptor: {exc.message}",
                bundle_id=exc.bundle_id or bundle_dir.name,
                path=exc.path or bundle_dir,
            ) from exc

    # ------- Files -------

    def _read_primary_document(self, bundle_dir: Path, bundle_id: str) -> str:
        doc_path = bundle_dir / self.primary_document
        if not doc_path.is_file():
            raise ParseError("Primary document not found", bundle_id=bundle_id, path=doc_path)
        try:
            return read_text(doc_path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(
                f"Could not read primary document: {exc}", bundle_id=bundle_id, path=doc_path
            ) from exc

    def _collect(self, directory, pattern, bundle_id, diagnostics, parse_file):
        """Parse every matching file in ``directory``, isolating failures."""
        if not directory.is_dir():
            return []
        results = []
        for file_path in sorted(directory.glob(pattern)):
            if not file_path.is_file() or file_path.name.startswith("."):
                continue
            try:
                parsed = parse_file(file_path, bundle_id)
            except ParseError as exc:
                diagnostic = ParseDiagnostic(
                    bundle_id=bundle_id, path=file_path, message=exc.message
                )
                logger.warning("%s", diagnostic)
                diagnostics.append(diagnostic)
                continue
            if parsed is not None:
                results.append(parsed)
        return results

    def _read_file(self, file_path: Path, bundle_id: str) -> str:
        try:
            return read_text(file_path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(f"Could not read file: {exc}", bundle_id=bundle_id, path=file_path) from exc

    def _read_header(
        self, file_path: Path, bundle_id: str, schema_name: str
    ) -> Tuple[Dict[str, Any], str]:
        text = self._read_file(file_path, bundle_id)
        try:
            doc = parse_frontmatter(text)
        except ValueError as exc:
            raise ParseError(str(exc), bundle_id=bundle_id, path=file_path) from exc

        header = doc.frontmatter
        if "name" in header and not str(header.get("name") or "").strip():
            raise ParseError("Missing required field: name", bundle_id=bundle_id, path=file_path)

        issues = validate_payload_safe(header, schema_name)
        if issues:
            raise ParseError(
                f"Invalid header: {'; '.join(issues)}", bundle_id=bundle_id, path=file_path
            )
        return header, doc.content

    def _parse_agent(self, file_path: Path, bundle_id: str) -> Agent:
        header, body = self._read_header(file_path, bundle_id, "agent-header")
        return Agent(
            name=str(header.get("name") or file_path.stem).strip(),
            description=str(header.get("description") or ""),
            tools=_tool_list(header.get("tools")),
            content=body.strip(),
            source=bundle_id,
            path=file_path,
        )

    def _parse_command(self, file_path: Path, bundle_id: str) -> Command:
        header, body = self._read_header(file_path, bundle_id, "command-header")
        return Command(
            name=str(header.get("name") or file_path.stem).strip(),
            description=str(header.get("description") or ""),
            allowed_tools=_tool_list(header.get("allowed-tools")),
            argument_hint=str(header.get("argument-hint") or ""),
            content=body.strip(),
            source=bundle_id,
            path=file_path,
        )

    def _parse_hook(self, file_path: Path, bundle_id: str) -> Optional[Hook]:
        suffix = file_path.suffix.lower()
        if suffix == ".json":
            content = self._read_file(file_path, bundle_id)
            try:
                data = json.loads(content)
            except json.JSONDecodeError as exc:
                raise ParseError(
                    f"Invalid JSON in hook file: {exc}", bundle_id=bundle_id, path=file_path
                ) from exc
            description = str(data.get("description") or "") if isinstance(data, dict) else ""
            return Hook(
                name=file_path.name,
                kind="config",
                content=content,
                source=bundle_id,
                description=description,
                path=file_path,
            )
        if suffix in self.hook_script_extensions:
            return Hook(
                name=file_path.name,
                kind="script",
                content=self._read_file(file_path, bundle_id),
                source=bundle_id,
                path=file_path,
            )
        logger.debug("Skipping unsupported hook file %s", file_path)
        return None

    def _read_settings(
        self, settings_path: Path, bundle_id: str, diagnostics: List[ParseDiagnostic]
    ) -> Dict[str, Any]:
        if not settings_path.is_file():
            return {}
        try:
            data = read_json(settings_path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            message = f"Invalid settings file: {exc}"
        else:
            if isinstance(data, Mapping):
                return dict(data)
            message = f"Settings must be a JSON object, got {type(data).__name__}"
        diagnostic = ParseDiagnostic(bundle_id=bundle_id, path=settings_path, message=message)
        logger.warning("%s", diagnostic)
        diagnostics.append(diagnostic)
        return {}


__all__ = ["BundleParser"]
