"""YAML frontmatter parsing utilities.

Artifact files (agents, commands) carry a small YAML header delimited by
'---' markers at the start of the file:

    ```markdown
    ---
    name: reviewer
    description: Reviews pull requests
    tools: Read, Grep
    ---

    You are a careful reviewer...
    ```
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict

import yaml

from tessera.core.utils.io import dump_yaml_string


FRONTMATTER_PATTERN = re.compile(
    r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)",
    re.DOTALL,
)


@dataclass
class ParsedDocument:
    """Result of parsing a document with YAML frontmatter.

    Attributes:
        frontmatter: Parsed YAML frontmatter as a dictionary
        content: The text after the frontmatter
        raw_frontmatter: The raw YAML string (for debugging)
    """
    frontmatter: Dict[str, Any]
    content: str
    raw_frontmatter: str


def parse_frontmatter(content: str) -> ParsedDocument:
    """Parse YAML frontmatter from markdown content.

    Content without a leading '---' block is returned unchanged with an
    empty frontmatter mapping.

    Raises:
        ValueError: If the YAML is invalid or is not a mapping

    Example:
        >>> doc = parse_frontmatter('''---
        ... name: reviewer
        ... ---
        ... Body
        ... ''')
        >>> doc.frontmatter['name']
        'reviewer'
        >>> doc.content.strip()
        'Body'
    """
    match = FRONTMATTER_PATTERN.match(content)

    if not match:
        return ParsedDocument(frontmatter={}, content=content, raw_frontmatter="")

    raw_yaml = match.group(1)
    remaining_content = content[match.end():]

    try:
        parsed = yaml.safe_load(raw_yaml)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in frontmatter: {e}") from e
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Frontmatter must be a YAML mapping, got {type(parsed).__name__}")

    return ParsedDocument(
        frontmatter=parsed,
        content=remaining_content,
        raw_frontmatter=raw_yaml,
    )


def format_frontmatter(data: Dict[str, Any], *, exclude_empty: bool = True) -> str:
    """Format a dictionary as YAML frontmatter wrapped in '---' delimiters.

    Keys keep insertion order. With ``exclude_empty`` (default), keys whose
    value is None, an empty string or an empty list are left out.

    Example:
        >>> print(format_frontmatter({'name': 'reviewer', 'tools': []}))
        ---
        name: reviewer
        ---
        <BLANKLINE>
    """
    if exclude_empty:
        data = {k: v for k, v in data.items() if v not in (None, "", [], ())}
    if not data:
        return "---\n---\n"
    return f"---\n{dump_yaml_string(data, sort_keys=False)}---\n"


__all__ = [
    "ParsedDocument",
    "parse_frontmatter",
    "format_frontmatter",
    "FRONTMATTER_PATTERN",
]
