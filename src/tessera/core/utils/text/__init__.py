"""Text processing utilities."""
from __future__ import annotations

from .frontmatter import (
    FRONTMATTER_PATTERN,
    ParsedDocument,
    format_frontmatter,
    parse_frontmatter,
)

__all__ = [
    "ParsedDocument",
    "parse_frontmatter",
    "format_frontmatter",
    "FRONTMATTER_PATTERN",
]
