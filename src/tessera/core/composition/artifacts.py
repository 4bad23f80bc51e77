"""Artifact merger: positional last-writer-wins over named artifacts.

The same rule applies to agents, commands and hooks. Groups are processed
in the order given; a later artifact with an already-seen name replaces the
stored record wholesale (no field-level merge) while keeping the position
of the first occurrence. Callers order groups by precedence, lowest first.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Tuple, TypeVar

from tessera.core.errors import MergeError

logger = logging.getLogger(__name__)

A = TypeVar("A")


def _field(artifact: Any, name: str) -> Any:
    if isinstance(artifact, Mapping):
        return artifact.get(name)
    return getattr(artifact, name, None)


def merge_artifacts(groups: Iterable[Iterable[A]]) -> Tuple[A, ...]:
    """Merge ordered artifact groups, keeping one entry per name.

    Accepts artifact records (``Agent``, ``Command``, ``Hook``) or plain
    mappings with a ``name`` key.

    Raises:
        MergeError: If an artifact has no name.

    Example:
        >>> merge_artifacts([[{"name": "x", "description": "old"}],
        ...                  [{"name": "x", "description": "new"}]])
        ({'name': 'x', 'description': 'new'},)
    """
    merged: Dict[str, A] = {}
    for position, group in enumerate(groups):
        for artifact in group:
            name = _field(artifact, "name")
            if not isinstance(name, str) or not name.strip():
                raise MergeError(
                    f"Artifact without a name in group {position}",
                    bundle_id=_field(artifact, "source"),
                )
            if name in merged:
                logger.debug(
                    "Artifact '%s' from %s overrides %s",
                    name, _field(artifact, "source") or f"group {position}",
                    _field(merged[name], "source") or "an earlier group",
                )
            merged[name] = artifact
    return tuple(merged.values())


# One rule for every category; the aliases keep call sites readable.
merge_agents = merge_artifacts
merge_commands = merge_artifacts
merge_hooks = merge_artifacts


__all__ = ["merge_artifacts", "merge_agents", "merge_commands", "merge_hooks"]
