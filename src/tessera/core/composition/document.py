"""Section merger: composes several primary documents into one.

Documents are ordered by bundle priority (highest first, stable). Sections are matched
across documents by title and by position among same-titled sections, so a
title repeated inside one document keeps each of its occurrences. Each such
slot is resolved independently:

- exclusive: some bundle whose document has the title declares it
  ``mergeable: false``; only the highest-priority such bundle contributes.
- additive: bodies from every bundle are concatenated in priority order,
  separated by the boundary marker, identical blocks included once.

Bodies are split on existing boundary markers before de-duplication, so
merging a composed document again never multiplies markers.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Tuple

from tessera.core.catalog import BundleMetadata, order_by_priority
from tessera.core.config import ConfigManager
from tessera.core.errors import MergeError

from .sections import (
    SECTION_LEVEL,
    Section,
    SplitDocument,
    close_open_fence,
    render_document,
    split_blocks,
    split_sections,
)

if TYPE_CHECKING:
    from tessera.core.bundles import Bundle

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "# Composed Configuration"
BOUNDARY_MARKER = "<!-- tessera:merge -->"

DocumentEntry = Tuple[str, BundleMetadata]


def _check_unique(entries: Sequence[DocumentEntry]) -> None:
    seen = set()
    for _, metadata in entries:
        if metadata.id in seen:
            raise MergeError("Bundle appears more than once in one merge", bundle_id=metadata.id)
        seen.add(metadata.id)


def join_blocks(bodies: Iterable[str], marker: str = BOUNDARY_MARKER) -> str:
    """Concatenate bodies with ``marker``, dropping empty and repeated blocks."""
    blocks: List[str] = []
    seen = set()
    for body in bodies:
        for block in split_blocks(body, marker):
            key = block.strip()
            if not key or key in seen:
                continue
            seen.add(key)
            blocks.append(close_open_fence(block))
    return f"\n\n{marker}\n\n".join(blocks)


SectionSlot = Tuple[str, int]


def _occurrence(doc: SplitDocument, slot: SectionSlot) -> Optional[Section]:
    """The ``n``-th section titled ``title`` in ``doc``, if there is one."""
    title, index = slot
    found = [s for s in doc.sections if s.title == title]
    return found[index] if index < len(found) else None


def _slots(doc: SplitDocument) -> List[SectionSlot]:
    counts: Dict[str, int] = {}
    slots = []
    for title in doc.titles:
        slots.append((title, counts.get(title, 0)))
        counts[title] = counts.get(title, 0) + 1
    return slots


def _resolve_section(
    slot: SectionSlot,
    documents: Sequence[Tuple[SplitDocument, BundleMetadata]],
    marker: str,
) -> Section:
    title = slot[0]
    contributions = [(metadata, _occurrence(doc, slot)) for doc, metadata in documents]
    contributions = [(metadata, s) for metadata, s in contributions if s is not None]

    owner = next(
        ((metadata, s) for metadata, s in contributions if metadata.is_exclusive(title)),
        None,
    )
    if owner is not None:
        metadata, section = owner
        dropped = [m.id for m, _ in contributions if m.id != metadata.id]
        if dropped:
            logger.debug(
                "Section '%s' is exclusive to %s; dropping content from %s",
                title, metadata.id, ", ".join(dropped),
            )
        return Section(
            title=title,
            body=join_blocks([section.body], marker),
            mergeable=False,
            priority=section.priority,
        )

    sections = [s for _, s in contributions]
    return Section(
        title=title,
        body=join_blocks((s.body for s in sections), marker),
        mergeable=True,
        priority=max(s.priority for s in sections),
    )


def compose_sections(
    entries: Iterable[DocumentEntry],
    *,
    boundary_marker: str = BOUNDARY_MARKER,
    level: int = SECTION_LEVEL,
) -> SplitDocument:
    """Resolve the composed preamble and sections without rendering them.

    Raises:
        MergeError: If the same bundle id appears twice.
    """
    entries = list(entries)
    _check_unique(entries)
    ordered = order_by_priority(entries, key=lambda entry: entry[1].priority)
    documents = [
        (split_sections(text, metadata=metadata, level=level), metadata)
        for text, metadata in ordered
    ]

    preamble = next((doc.preamble for doc, _ in documents if doc.preamble.strip()), "")

    slots: List[SectionSlot] = []
    for doc, _ in documents:
        for slot in _slots(doc):
            if slot not in slots:
                slots.append(slot)

    return SplitDocument(
        preamble=preamble,
        sections=tuple(_resolve_section(slot, documents, boundary_marker) for slot in slots),
    )


def merge_documents(
    entries: Iterable[DocumentEntry],
    *,
    default_title: str = DEFAULT_TITLE,
    boundary_marker: str = BOUNDARY_MARKER,
    level: int = SECTION_LEVEL,
) -> str:
    """Compose ``(document, metadata)`` pairs into one document.

    An empty input, or one whose documents carry no content at all, yields a
    document holding only ``default_title``.

    Example:
        >>> merge_documents([])
        '# Composed Configuration\\n'
    """
    entries = list(entries)
    if not entries:
        return default_title.strip() + "\n"
    composed = compose_sections(entries, boundary_marker=boundary_marker, level=level)
    if not composed.preamble.strip() and not composed.sections:
        return default_title.strip() + "\n"
    return render_document(composed.preamble, composed.sections, level=level)


class SectionMerger:
    """``merge_documents`` bound to configured title and boundary marker."""

    def __init__(self, config: Optional[ConfigManager] = None) -> None:
        cfg = config or ConfigManager()
        self.default_title = str(cfg.get("composition.default_title") or DEFAULT_TITLE)
        self.boundary_marker = str(cfg.get("composition.boundary_marker") or BOUNDARY_MARKER)

    def merge(self, entries: Iterable[DocumentEntry]) -> str:
        return merge_documents(
            entries,
            default_title=self.default_title,
            boundary_marker=self.boundary_marker,
        )

    def merge_bundles(self, bundles: Iterable["Bundle"]) -> str:
        return self.merge((bundle.document, bundle.metadata) for bundle in bundles)


__all__ = [
    "DEFAULT_TITLE",
    "BOUNDARY_MARKER",
    "DocumentEntry",
    "join_blocks",
    "compose_sections",
    "merge_documents",
    "SectionMerger",
]
