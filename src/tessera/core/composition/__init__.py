"""Composition: section-aware document merging, artifact and settings merges."""
from __future__ import annotations

from .artifacts import merge_agents, merge_artifacts, merge_commands, merge_hooks
from .composer import BundleComposer, CompositionResult
from .document import (
    BOUNDARY_MARKER,
    DEFAULT_TITLE,
    SectionMerger,
    compose_sections,
    join_blocks,
    merge_documents,
)
from .output import artifact_filename, render_agent, render_command, write_composition
from .sections import Section, SplitDocument, render_document, split_blocks, split_sections
from .settings import merge_settings

__all__ = [
    "BundleComposer",
    "CompositionResult",
    "SectionMerger",
    "merge_documents",
    "compose_sections",
    "join_blocks",
    "DEFAULT_TITLE",
    "BOUNDARY_MARKER",
    "Section",
    "SplitDocument",
    "split_sections",
    "split_blocks",
    "render_document",
    "merge_artifacts",
    "merge_agents",
    "merge_commands",
    "merge_hooks",
    "merge_settings",
    "artifact_filename",
    "render_agent",
    "render_command",
    "write_composition",
]
