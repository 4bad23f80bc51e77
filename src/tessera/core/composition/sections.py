"""Fence-aware section splitting for primary documents.

A document is a preamble followed by sections. Sections start at ATX
headings of the section level (``## Title`` by default); ``#`` titles stay in
the preamble and deeper headings stay inside section bodies. Heading-like
lines inside fenced code blocks (``` or ~~~) are never boundaries.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from tessera.core.catalog import BundleMetadata

SECTION_LEVEL = 2

HEADING_PATTERN = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
FENCE_OPEN_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
FENCE_CLOSE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})[ \t]*$")


@dataclass(frozen=True)
class Section:
    title: str
    body: str
    mergeable: bool = True
    priority: int = 0


@dataclass(frozen=True)
class SplitDocument:
    preamble: str
    sections: Tuple[Section, ...] = ()

    @property
    def titles(self) -> List[str]:
        return [s.title for s in self.sections]


class FenceTracker:
    """Linear scan state: are we inside a fenced code block?

    ``feed`` returns True when the line belongs to a fence, delimiter lines
    included.
    """

    def __init__(self) -> None:
        self._marker: Optional[str] = None

    @property
    def open(self) -> bool:
        return self._marker is not None

    @property
    def closing_line(self) -> str:
        return self._marker or ""

    def feed(self, line: str) -> bool:
        if self._marker is None:
            match = FENCE_OPEN_PATTERN.match(line)
            if match is None:
                return False
            run = match.group(1)
            # Backtick fences cannot carry backticks in their info string
            if run[0] == "`" and "`" in line[match.end():]:
                return False
            self._marker = run
            return True

        match = FENCE_CLOSE_PATTERN.match(line)
        if match is not None:
            run = match.group(1)
            if run[0] == self._marker[0] and len(run) >= len(self._marker):
                self._marker = None
        return True


def iter_unfenced(lines: Iterable[str]) -> Iterator[Tuple[str, bool]]:
    """Yield ``(line, fenced)`` pairs for a sequence of lines."""
    tracker = FenceTracker()
    for line in lines:
        yield line, tracker.feed(line)


def match_heading(line: str) -> Optional[Tuple[int, str]]:
    """Return ``(level, title)`` for an ATX heading line with a non-empty title."""
    match = HEADING_PATTERN.match(line)
    if match is None:
        return None
    title = (match.group(2) or "").strip()
    if not title:
        return None
    return len(match.group(1)), title


def trim_blank_lines(lines: Sequence[str]) -> str:
    """Join ``lines`` without leading/trailing blank lines (indentation kept)."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def close_open_fence(text: str) -> str:
    """Append a closing delimiter when ``text`` ends inside a fence.

    Keeps an unterminated code block in one merged body from swallowing the
    sections rendered after it.
    """
    tracker = FenceTracker()
    for line in text.splitlines():
        tracker.feed(line)
    if tracker.open:
        return f"{text}\n{tracker.closing_line}"
    return text


def split_sections(
    text: str,
    *,
    metadata: Optional["BundleMetadata"] = None,
    level: int = SECTION_LEVEL,
) -> SplitDocument:
    """Split ``text`` into a preamble and its sections.

    When ``metadata`` is given, each section's ``mergeable`` / ``priority``
    come from the bundle's declared policy for that title.

    Example:
        >>> doc = split_sections("# A\\n## One\\nX\\n## Two\\nY")
        >>> doc.preamble, doc.titles
        ('# A', ['One', 'Two'])
    """
    preamble_lines: List[str] = []
    raw_sections: List[Tuple[str, List[str]]] = []
    current: List[str] = preamble_lines

    for line, fenced in iter_unfenced(text.splitlines()):
        heading = None if fenced else match_heading(line)
        if heading is not None and heading[0] == level:
            current = []
            raw_sections.append((heading[1], current))
            continue
        current.append(line)

    sections = []
    for title, lines in raw_sections:
        policy = metadata.section_policy(title) if metadata is not None else None
        sections.append(
            Section(
                title=title,
                body=trim_blank_lines(lines),
                mergeable=policy.mergeable if policy is not None else True,
                priority=policy.priority if policy is not None else 0,
            )
        )
    return SplitDocument(preamble=trim_blank_lines(preamble_lines), sections=tuple(sections))


def split_blocks(body: str, marker: str) -> List[str]:
    """Split a section body on boundary-marker lines outside fences."""
    blocks: List[List[str]] = [[]]
    for line, fenced in iter_unfenced(body.splitlines()):
        if not fenced and line.strip() == marker:
            blocks.append([])
            continue
        blocks[-1].append(line)
    return [trim_blank_lines(block) for block in blocks]


def render_document(
    preamble: str,
    sections: Iterable[Section],
    *,
    level: int = SECTION_LEVEL,
) -> str:
    """Render a preamble and sections back to text (newline-terminated)."""
    parts: List[str] = []
    if preamble:
        parts.append(close_open_fence(preamble))
    hashes = "#" * level
    for section in sections:
        if section.body:
            parts.append(f"{hashes} {section.title}\n\n{close_open_fence(section.body)}")
        else:
            parts.append(f"{hashes} {section.title}")
    return "\n\n".join(parts) + "\n"


__all__ = [
    "SECTION_LEVEL",
    "Section",
    "SplitDocument",
    "FenceTracker",
    "iter_unfenced",
    "match_heading",
    "trim_blank_lines",
    "close_open_fence",
    "split_sections",
    "split_blocks",
    "render_document",
]
