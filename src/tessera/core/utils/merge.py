"""Canonical deep merge utilities.

Used by the configuration layer and by settings composition. Inputs are
never mutated.

List handling is selected by the caller:
- ``"replace"``: the override list replaces the base list
- ``"union"``: lists are concatenated, dropping items already present
"""
from __future__ import annotations

import copy
from typing import Any, Dict, List

LIST_STRATEGIES = ("replace", "union")


def deep_merge(
    base: Dict[str, Any],
    override: Dict[str, Any],
    *,
    lists: str = "replace",
) -> Dict[str, Any]:
    """Recursively merge dictionaries without mutating inputs.

    Args:
        base: Base dictionary (lower priority)
        override: Override dictionary (higher priority)
        lists: List strategy, one of ``LIST_STRATEGIES``

    Returns:
        New merged dictionary

    Example:
        >>> deep_merge({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
        {'a': 1, 'b': {'c': 2, 'd': 3}}
        >>> deep_merge({"x": [1, 2]}, {"x": [2, 3]}, lists="union")
        {'x': [1, 2, 3]}
    """
    if lists not in LIST_STRATEGIES:
        raise ValueError(f"Unknown list strategy: {lists!r}")

    result: Dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value, lists=lists)
        elif isinstance(current, list) and isinstance(value, list) and lists == "union":
            result[key] = union_lists(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def union_lists(base: List[Any], override: List[Any]) -> List[Any]:
    """Concatenate lists keeping first occurrences only (order preserving).

    Uses equality rather than hashing so dict entries (e.g. hook entries)
    are de-duplicated too.

    Example:
        >>> union_lists(["Read", "Write"], ["Write", "Bash"])
        ['Read', 'Write', 'Bash']
    """
    merged: List[Any] = []
    for item in [*base, *override]:
        if item not in merged:
            merged.append(copy.deepcopy(item))
    return merged


__all__ = ["deep_merge", "union_lists", "LIST_STRATEGIES"]
