"""Settings composition: a deep merge of the bundles' settings objects.

Later settings take precedence for scalars, nested objects merge, and
lists are unioned so permission rules and hook entries from every bundle
survive exactly once. The ``statusLine`` object is replaced whole by the
last settings that define it. Legacy top-level ``allow`` / ``deny`` lists
are moved under ``permissions``.
"""
from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, Mapping, Optional

from tessera.core.utils.merge import deep_merge

LEGACY_PERMISSION_KEYS = ("allow", "deny")
REPLACED_KEYS = ("statusLine",)


def _normalize(settings: Mapping[str, Any]) -> Dict[str, Any]:
    data = dict(settings)
    legacy = {k: data.pop(k) for k in LEGACY_PERMISSION_KEYS if isinstance(data.get(k), list)}
    if legacy:
        permissions = data.get("permissions")
        data["permissions"] = deep_merge(
            permissions if isinstance(permissions, dict) else {}, legacy, lists="union"
        )
    return data


def merge_settings(settings_list: Iterable[Optional[Mapping[str, Any]]]) -> Dict[str, Any]:
    """Deep-merge settings objects in order; inputs are never mutated.

    Example:
        >>> merge_settings([
        ...     {"permissions": {"allow": ["Read"]}, "env": {"A": "1"}},
        ...     {"allow": ["Read", "Bash"], "env": {"A": "2"}},
        ... ])
        {'permissions': {'allow': ['Read', 'Bash']}, 'env': {'A': '2'}}
    """
    merged: Dict[str, Any] = {}
    for settings in settings_list:
        if not settings:
            continue
        merged = deep_merge(merged, _normalize(settings), lists="union")
        for key in REPLACED_KEYS:
            if key in settings:
                merged[key] = copy.deepcopy(settings[key])
    return merged


__all__ = ["merge_settings"]
