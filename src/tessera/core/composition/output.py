"""Render composed artifacts and write a composition to disk.

Output layout (names configurable under ``bundle.*``)::

    <output>/
      CLAUDE.md
      .claude/
        settings.json
        agents/<name>.md
        commands/<name>.md
        hooks/<name>
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from tessera.core.bundles import Agent, Command, Hook
from tessera.core.config import ConfigManager
from tessera.core.errors import MergeError
from tessera.core.utils.io import write_json_atomic, write_text
from tessera.core.utils.text import format_frontmatter

from .composer import CompositionResult

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9-]")
SCRIPT_MODE = 0o755


def artifact_filename(name: str) -> str:
    """Markdown filename for an agent or command name.

    Example:
        >>> artifact_filename("Code Reviewer")
        'code-reviewer.md'
    """
    stem = _UNSAFE_FILENAME_CHARS.sub("-", name.strip().lower())
    if not stem.strip("-"):
        raise MergeError(f"Cannot derive a filename from artifact name {name!r}")
    return f"{stem}.md"


def _render(header: Dict[str, object], content: str) -> str:
    body = content.strip("\n")
    return f"{format_frontmatter(header)}\n{body}\n" if body else format_frontmatter(header)


def render_agent(agent: Agent) -> str:
    """Agent file text: YAML header (name, description, tools) plus body."""
    return _render(
        {"name": agent.name, "description": agent.description, "tools": list(agent.tools)},
        agent.content,
    )


def render_command(command: Command) -> str:
    return _render(
        {
            "name": command.name,
            "description": command.description,
            "allowed-tools": list(command.allowed_tools),
            "argument-hint": command.argument_hint,
        },
        command.content,
    )


def _hook_filename(hook: Hook) -> str:
    name = Path(hook.name).name
    if name in ("", ".", ".."):
        raise MergeError(f"Invalid hook name {hook.name!r}", bundle_id=hook.source)
    return name


def write_composition(
    result: CompositionResult,
    output_dir: Union[str, Path],
    *,
    dry_run: bool = False,
    config: Optional[ConfigManager] = None,
) -> List[Path]:
    """Write ``result`` under ``output_dir`` and return the paths written.

    With ``dry_run`` nothing touches the filesystem; the returned list is
    the set of paths that would be written. Each file is replaced
    atomically.

    Raises:
        MergeError: If two artifacts of the same kind would be written to the
            same file, for example "Code Reviewer" and "code-reviewer".
    """
    cfg = config or ConfigManager()
    root = Path(output_dir)
    artifact_dir = root / str(cfg.get("bundle.artifact_dir", ".claude"))

    planned: Dict[Path, Union[str, dict]] = {
        root / str(cfg.get("bundle.primary_document", "CLAUDE.md")): result.document,
    }
    owners: Dict[Path, Union[Agent, Command, Hook]] = {}

    def _plan(path: Path, artifact: Union[Agent, Command, Hook], payload: str) -> None:
        previous = owners.get(path)
        if previous is not None:
            raise MergeError(
                f"Artifacts {previous.name!r} (from {previous.source}) and "
                f"{artifact.name!r} (from {artifact.source}) both map to {path.name}",
                bundle_id=artifact.source,
                path=path,
            )
        owners[path] = artifact
        planned[path] = payload

    for agent in result.agents:
        _plan(artifact_dir / "agents" / artifact_filename(agent.name), agent, render_agent(agent))
    for command in result.commands:
        _plan(
            artifact_dir / "commands" / artifact_filename(command.name),
            command,
            render_command(command),
        )
    hook_paths = []
    for hook in result.hooks:
        path = artifact_dir / "hooks" / _hook_filename(hook)
        _plan(path, hook, hook.content)
        if hook.kind == "script":
            hook_paths.append(path)
    planned[artifact_dir / str(cfg.get("bundle.settings_file", "settings.json"))] = dict(result.settings)

    if dry_run:
        logger.info("Dry run: %d file(s) would be written under %s", len(planned), root)
        return list(planned)

    for path, payload in planned.items():
        if isinstance(payload, dict):
            write_json_atomic(path, payload)
        else:
            write_text(path, payload)
        logger.debug("Wrote %s", path)
    for path in hook_paths:
        os.chmod(path, SCRIPT_MODE)

    logger.info("Wrote %d file(s) under %s", len(planned), root)
    return list(planned)


__all__ = ["artifact_filename", "render_agent", "render_command", "write_composition"]
